"""
deltaspec.core.parser - Requirement block extraction.

Scans spec text line by line and cuts it into requirement blocks. The
extractor never fails on malformed structure; unexpected input simply
yields fewer or different blocks.
"""

from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, List, Optional, Union

from deltaspec.core.models import RequirementBlock
from deltaspec.core.patterns import (
    SCENARIO_HEADER_PATTERN,
    LineKind,
    classify_line,
    requirement_name,
    split_lines,
)
from deltaspec.utilities.spec_writer import read_spec

# A "## " heading ends the requirements of a base document.
BASE_CLOSING_KINDS: FrozenSet[LineKind] = frozenset({LineKind.SECTION})

# Inside a delta section any other "### " heading also ends a block.
DELTA_CLOSING_KINDS: FrozenSet[LineKind] = frozenset({LineKind.SECTION, LineKind.SUBSECTION})


class _BlockBuilder:
    """Accumulates the lines of the block currently being read."""

    def __init__(self, header_line: str, name: str, terminator: str):
        self.header_line = header_line
        self.name = name
        self.parts: List[str] = [header_line, terminator or "\n"]

    def append(self, line: str, terminator: str) -> None:
        self.parts.append(line)
        self.parts.append(terminator or "\n")

    def build(self) -> RequirementBlock:
        return RequirementBlock(
            name=self.name,
            header_line=self.header_line,
            raw_content="".join(self.parts),
        )


def parse_requirement_blocks(
    text: str,
    closing: FrozenSet[LineKind] = BASE_CLOSING_KINDS,
) -> List[RequirementBlock]:
    """
    Extract requirement blocks in source order.

    Args:
        text: Document (or section) text
        closing: Line kinds that close the open block without starting one

    Returns:
        List of RequirementBlock; empty when there are no requirement headings
    """
    blocks: List[RequirementBlock] = []
    current: Optional[_BlockBuilder] = None

    for line, terminator in split_lines(text):
        kind = classify_line(line)

        if kind is LineKind.REQUIREMENT:
            if current is not None:
                blocks.append(current.build())
            current = _BlockBuilder(line, requirement_name(line) or "", terminator)
            continue

        if kind in closing:
            if current is not None:
                blocks.append(current.build())
                current = None
            continue

        if current is not None:
            current.append(line, terminator)

    if current is not None:
        blocks.append(current.build())

    return blocks


def parse_requirements_file(file_path: Union[str, Path]) -> List[RequirementBlock]:
    """
    Parse requirement blocks from a base spec file.

    Raises:
        OSError: If the file cannot be read
    """
    text = read_spec(file_path)
    return parse_requirement_blocks(text)


def parse_scenarios(raw_content: str) -> List[str]:
    """Return the names of all ``#### Scenario:`` headings in a block."""
    scenarios = []
    for line, _ in split_lines(raw_content):
        match = SCENARIO_HEADER_PATTERN.match(line.strip())
        if match:
            scenarios.append(match.group("name").strip())
    return scenarios
