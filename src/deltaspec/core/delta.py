"""
deltaspec.core.delta - Delta spec parsing.

A delta document carries up to four sections::

    ## ADDED Requirements      full requirement blocks
    ## MODIFIED Requirements   full replacement blocks
    ## REMOVED Requirements    bare ### Requirement: headings (+ notes)
    ## RENAMED Requirements    - FROM: `### Requirement: Old`
                               - TO: `### Requirement: New`

Each section runs from its heading to the next ``##`` heading or the end
of the document. A missing section is an empty collection, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from deltaspec.core.errors import DeltaParseError
from deltaspec.core.models import DeltaPlan, RenameOp, RequirementBlock
from deltaspec.core.parser import DELTA_CLOSING_KINDS, parse_requirement_blocks
from deltaspec.core.patterns import (
    RENAME_FROM_PATTERN,
    RENAME_TO_PATTERN,
    LineKind,
    classify_line,
    is_delta_section_header,
    requirement_name,
    split_lines,
)
from deltaspec.utilities.spec_writer import read_spec


@dataclass(frozen=True)
class DeltaSection:
    """
    Body of one delta section.

    Attributes:
        keyword: ADDED, MODIFIED, REMOVED or RENAMED
        text: Section body, from the line after the heading up to the next
            ``##`` heading (exclusive)
        first_line: 1-based line number of the first body line
    """

    keyword: str
    text: str
    first_line: int


def find_delta_section(content: str, keyword: str) -> Optional[DeltaSection]:
    """
    Locate the first ``## <keyword> Requirements`` section.

    Args:
        content: Full delta document text
        keyword: Section keyword (case-sensitive)

    Returns:
        DeltaSection, or None when the heading is absent
    """
    body: List[str] = []
    first_line = 0
    inside = False

    for number, (line, terminator) in enumerate(split_lines(content), start=1):
        if not inside:
            if is_delta_section_header(line, keyword):
                inside = True
                first_line = number + 1
            continue
        if classify_line(line) is LineKind.SECTION:
            break
        body.append(line + terminator)

    if not inside:
        return None
    return DeltaSection(keyword=keyword, text="".join(body), first_line=first_line)


def _parse_block_section(content: str, keyword: str) -> List[RequirementBlock]:
    section = find_delta_section(content, keyword)
    if section is None:
        return []
    return parse_requirement_blocks(section.text, closing=DELTA_CLOSING_KINDS)


def parse_removed_section(content: str) -> List[str]:
    """Names listed under ``## REMOVED Requirements``; notes are dropped."""
    section = find_delta_section(content, "REMOVED")
    if section is None:
        return []

    removed = []
    for line, _ in split_lines(section.text):
        name = requirement_name(line.strip())
        if name is not None:
            removed.append(name)
    return removed


def parse_renamed_section(content: str, strict: bool = False) -> List[RenameOp]:
    """
    FROM/TO pairs listed under ``## RENAMED Requirements``.

    A TO line with no pending FROM is dropped. In strict mode it raises
    DeltaParseError instead, as does a FROM that is never completed.

    Args:
        content: Full delta document text
        strict: Reject unpaired FROM/TO lines

    Returns:
        List of RenameOp in document order
    """
    section = find_delta_section(content, "RENAMED")
    if section is None:
        return []

    renamed: List[RenameOp] = []
    pending: Optional[str] = None
    pending_line = 0

    for offset, (raw_line, _) in enumerate(split_lines(section.text)):
        line = raw_line.strip()
        number = section.first_line + offset

        from_match = RENAME_FROM_PATTERN.match(line)
        if from_match:
            if strict and pending is not None:
                raise DeltaParseError(
                    f"RENAMED FROM {pending!r} has no matching TO line", pending_line
                )
            pending = from_match.group("name").strip()
            pending_line = number
            continue

        to_match = RENAME_TO_PATTERN.match(line)
        if not to_match:
            continue
        if pending is None:
            if strict:
                raise DeltaParseError(
                    f"RENAMED TO {to_match.group('name').strip()!r} has no preceding FROM line",
                    number,
                )
            continue

        renamed.append(RenameOp(from_name=pending, to_name=to_match.group("name").strip()))
        pending = None

    if strict and pending is not None:
        raise DeltaParseError(f"RENAMED FROM {pending!r} has no matching TO line", pending_line)

    return renamed


def parse_delta_text(content: str, strict_renames: bool = False) -> DeltaPlan:
    """
    Parse delta spec text into a DeltaPlan.

    Args:
        content: Delta document text
        strict_renames: Treat unpaired RENAMED lines as errors

    Returns:
        DeltaPlan (possibly operation-less)
    """
    return DeltaPlan(
        added=tuple(_parse_block_section(content, "ADDED")),
        modified=tuple(_parse_block_section(content, "MODIFIED")),
        removed=tuple(parse_removed_section(content)),
        renamed=tuple(parse_renamed_section(content, strict=strict_renames)),
    )


def parse_delta_file(file_path: Union[str, Path], strict_renames: bool = False) -> DeltaPlan:
    """
    Parse a delta spec file.

    Raises:
        OSError: If the file cannot be read
        DeltaParseError: On unpaired RENAMED lines in strict mode
    """
    content = read_spec(file_path)
    return parse_delta_text(content, strict_renames=strict_renames)
