"""
deltaspec.core.merger - Apply a delta plan to a base spec.

Operations are applied in the order RENAMED -> REMOVED -> MODIFIED, then
ADDED blocks are appended at the end of the requirements section.
Requirements that are neither removed nor added keep their original
relative position, even when renamed or modified.

The engine does not re-run the pre-merge checks; callers are expected to
validate first (see ``deltaspec.pipeline``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from deltaspec.core.delta import parse_delta_file
from deltaspec.core.errors import EmptyDeltaError, PreMergeError, SpecStructureError
from deltaspec.core.models import DeltaPlan, OperationCounts, RequirementBlock
from deltaspec.core.parser import parse_requirement_blocks
from deltaspec.core.patterns import (
    BLANK_LINE_RUN_RE,
    LineKind,
    classify_line,
    detect_newline,
    is_requirements_section_header,
    normalize_requirement_name,
    split_lines,
)
from deltaspec.utilities.spec_writer import read_spec

PURPOSE_PLACEHOLDER = "TODO: Add purpose description"
NEW_SPEC_ERROR = "target spec does not exist; only ADDED requirements are allowed for new specs"


class RequirementIndex:
    """
    Ordered association of normalized name -> requirement block.

    Entries keep their position for their whole lifetime: a rename
    re-keys in place, a modification swaps the block in place and a
    removal leaves a tombstone. Iteration yields the surviving blocks in
    original order.
    """

    def __init__(self, blocks: Iterable[RequirementBlock] = ()):
        self._entries: List[Optional[RequirementBlock]] = []
        self._positions: Dict[str, int] = {}
        for block in blocks:
            self._positions[block.key] = len(self._entries)
            self._entries.append(block)

    def __contains__(self, key: str) -> bool:
        return key in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[RequirementBlock]:
        for block in self._entries:
            if block is not None:
                yield block

    def get(self, key: str) -> Optional[RequirementBlock]:
        position = self._positions.get(key)
        return None if position is None else self._entries[position]

    def rename(self, from_key: str, new_name: str) -> bool:
        """Rewrite a block's heading and re-key it. False if absent."""
        position = self._positions.pop(from_key, None)
        if position is None:
            return False
        block = self._entries[position].renamed(new_name)
        self._entries[position] = block
        self._positions[block.key] = position
        return True

    def remove(self, key: str) -> bool:
        position = self._positions.pop(key, None)
        if position is None:
            return False
        self._entries[position] = None
        return True

    def replace(self, block: RequirementBlock) -> bool:
        """Swap in a replacement block with the same key. False if absent."""
        position = self._positions.get(block.key)
        if position is None:
            return False
        self._entries[position] = block
        return True


@dataclass(frozen=True)
class SpecSections:
    """
    A base spec cut around its requirements section.

    Attributes:
        preamble: Everything up to and including the ``## Requirements``
            heading line (without its terminator)
        requirements: The section body up to the next ``##`` heading
        after: The next ``##`` heading onwards (empty if none)
    """

    preamble: str
    requirements: str
    after: str


def split_spec(content: str) -> SpecSections:
    """
    Split a base spec into preamble, requirements span and trailing span.

    Raises:
        SpecStructureError: If there is no ``## Requirements`` heading
    """
    preamble: List[str] = []
    requirements: List[str] = []
    after: List[str] = []
    state = "preamble"

    for line, terminator in split_lines(content):
        if state == "preamble":
            if is_requirements_section_header(line):
                preamble.append(line)
                state = "requirements"
            else:
                preamble.append(line + terminator)
        elif state == "requirements":
            if classify_line(line) is LineKind.SECTION:
                state = "after"
                after.append(line + terminator)
            else:
                requirements.append(line + terminator)
        else:
            after.append(line + terminator)

    if state == "preamble":
        raise SpecStructureError("base spec has no '## Requirements' section")

    return SpecSections(
        preamble="".join(preamble),
        requirements="".join(requirements),
        after="".join(after),
    )


def _leading_text(requirements: str) -> str:
    """Text inside the requirements section before its first requirement."""
    lines = []
    for line, terminator in split_lines(requirements):
        if classify_line(line) is LineKind.REQUIREMENT:
            break
        lines.append(line + terminator)
    return "".join(lines).strip("\r\n")


def _block_text(block: RequirementBlock) -> str:
    return block.raw_content.rstrip("\r\n")


def _with_newline(block: RequirementBlock, newline: str) -> RequirementBlock:
    """Rewrite a delta block's line terminators to match the base document."""
    raw = block.raw_content.replace("\r\n", "\n")
    if newline != "\n":
        raw = raw.replace("\n", newline)
    return replace(block, raw_content=raw)


def collapse_blank_lines(content: str, newline: str = "\n") -> str:
    """Collapse every run of three or more line breaks into exactly two."""
    return BLANK_LINE_RUN_RE.sub(newline * 2, content)


def format_capability_name(kebab: str) -> str:
    """``archive-workflow`` -> ``Archive Workflow``."""
    words = [word[:1].upper() + word[1:] for word in kebab.split("-")]
    return " ".join(words)


def generate_spec_skeleton(target_path: Union[str, Path], capability: Optional[str] = None) -> str:
    """
    Minimal document for a capability that has no spec yet.

    Args:
        target_path: Path of the spec to be created; the capability title
            comes from its parent directory name
        capability: Explicit title overriding the derived one

    Returns:
        Skeleton text ending with the ``## Requirements`` heading
    """
    if capability is None:
        directory = Path(target_path).parent.name
        capability = format_capability_name(directory) if directory else "Capability"

    return (
        f"# {capability} Specification\n\n"
        "## Purpose\n\n"
        f"{PURPOSE_PLACEHOLDER}\n\n"
        "## Requirements\n"
    )


def build_new_spec(
    target_path: Union[str, Path],
    plan: DeltaPlan,
    capability: Optional[str] = None,
) -> Tuple[str, OperationCounts]:
    """
    Create a spec from a skeleton plus the plan's ADDED blocks.

    Raises:
        PreMergeError: If the plan carries anything other than ADDED
    """
    if plan.modified or plan.removed or plan.renamed:
        raise PreMergeError(NEW_SPEC_ERROR)

    merged = generate_spec_skeleton(target_path, capability)
    if plan.added:
        merged += "\n" + "\n\n".join(_block_text(block) for block in plan.added) + "\n"

    return collapse_blank_lines(merged), OperationCounts(added=len(plan.added))


def merge_plan_into_text(base_content: str, plan: DeltaPlan) -> Tuple[str, OperationCounts]:
    """
    Apply a delta plan to the text of an existing spec.

    Args:
        base_content: Current base spec text
        plan: Delta plan (assumed validated against ``base_content``)

    Returns:
        Tuple of (merged text, operation counts)

    Raises:
        SpecStructureError: If the base has no ``## Requirements`` heading
    """
    sections = split_spec(base_content)
    newline = detect_newline(base_content)
    index = RequirementIndex(parse_requirement_blocks(sections.requirements))
    counts = OperationCounts()

    for op in plan.renamed:
        if index.rename(op.from_key, op.to_name):
            counts.renamed += 1

    for name in plan.removed:
        if index.remove(normalize_requirement_name(name)):
            counts.removed += 1

    for block in plan.modified:
        if index.replace(_with_newline(block, newline)):
            counts.modified += 1

    counts.added = len(plan.added)

    parts: List[str] = []
    leading = _leading_text(sections.requirements)
    if leading:
        parts.append(leading + newline)
    for block in index:
        if parts:
            parts.append(newline)
        parts.append(_block_text(block) + newline)
    for block in plan.added:
        parts.append(newline)
        parts.append(_block_text(_with_newline(block, newline)) + newline)

    if sections.after:
        parts.append(newline)
    merged = sections.preamble + newline * 2 + "".join(parts) + sections.after
    return collapse_blank_lines(merged, newline), counts


def apply_delta_plan(
    plan: DeltaPlan,
    target_path: Union[str, Path],
    target_exists: bool,
    capability: Optional[str] = None,
) -> Tuple[str, OperationCounts]:
    """
    Merge an already parsed plan into its target.

    Raises:
        EmptyDeltaError: If the plan has no operations
        OSError: If the target cannot be read
    """
    if not plan.has_deltas():
        raise EmptyDeltaError()

    if not target_exists:
        return build_new_spec(target_path, plan, capability)

    base_content = read_spec(target_path)
    return merge_plan_into_text(base_content, plan)


def merge_spec(
    target_path: Union[str, Path],
    delta_path: Union[str, Path],
    target_exists: bool,
    capability: Optional[str] = None,
    strict_renames: bool = False,
) -> Tuple[str, OperationCounts]:
    """
    Apply the delta spec at ``delta_path`` to the base spec at ``target_path``.

    Args:
        target_path: Base spec path (read only when ``target_exists``)
        delta_path: Delta spec path
        target_exists: Whether the base spec already exists
        capability: Title for a newly created spec
        strict_renames: Reject unpaired RENAMED lines

    Returns:
        Tuple of (merged text, operation counts). Nothing is written.
    """
    plan = parse_delta_file(delta_path, strict_renames=strict_renames)
    return apply_delta_plan(plan, target_path, target_exists, capability)
