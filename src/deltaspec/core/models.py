"""
deltaspec.core.models - Core data models for spec merging.

Provides dataclasses for requirement blocks, delta plans, rename
operations and merge accounting. Blocks and plans are built fresh on
every parse and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple

from deltaspec.core.patterns import normalize_requirement_name

REQUIREMENT_HEADER_PREFIX = "### Requirement: "


@dataclass(frozen=True)
class RequirementBlock:
    """
    A contiguous requirement unit of a spec document.

    Attributes:
        name: Declared requirement name, trimmed, case preserved
        header_line: The exact heading line (``### Requirement: <name>``)
        raw_content: Text from the heading line through the end of the
            block, newline terminated. Always starts with ``header_line``.
    """

    name: str
    header_line: str
    raw_content: str

    @property
    def key(self) -> str:
        """Normalized name used for all identity comparisons."""
        return normalize_requirement_name(self.name)

    def renamed(self, new_name: str) -> "RequirementBlock":
        """
        Return a copy with a rewritten heading.

        Only the first line of ``raw_content`` changes; its original line
        terminator is kept.
        """
        header = REQUIREMENT_HEADER_PREFIX + new_name
        first, sep, rest = self.raw_content.partition("\n")
        terminator = "\r\n" if first.endswith("\r") else "\n"
        raw = header + terminator + rest if sep else header + "\n"
        return RequirementBlock(name=new_name, header_line=header, raw_content=raw)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RenameOp:
    """A single FROM -> TO requirement rename."""

    from_name: str
    to_name: str

    @property
    def from_key(self) -> str:
        return normalize_requirement_name(self.from_name)

    @property
    def to_key(self) -> str:
        return normalize_requirement_name(self.to_name)


@dataclass(frozen=True)
class DeltaPlan:
    """
    Parsed intent of one delta document.

    Attributes:
        added: Wholly new requirements, in document order
        modified: Full replacements for existing requirements
        removed: Names of requirements to delete
        renamed: FROM/TO pairs
    """

    added: Tuple[RequirementBlock, ...] = ()
    modified: Tuple[RequirementBlock, ...] = ()
    removed: Tuple[str, ...] = ()
    renamed: Tuple[RenameOp, ...] = ()

    def has_deltas(self) -> bool:
        """True if at least one operation collection is non-empty."""
        return bool(self.added or self.modified or self.removed or self.renamed)

    def count_operations(self) -> int:
        """Total number of entries across all four collections."""
        return len(self.added) + len(self.modified) + len(self.removed) + len(self.renamed)

    def to_dict(self) -> Dict[str, list]:
        """Plain representation for JSON output."""
        return {
            "added": [req.name for req in self.added],
            "modified": [req.name for req in self.modified],
            "removed": list(self.removed),
            "renamed": [{"from": op.from_name, "to": op.to_name} for op in self.renamed],
        }


@dataclass
class OperationCounts:
    """Number of each delta operation applied by a merge."""

    added: int = 0
    modified: int = 0
    removed: int = 0
    renamed: int = 0

    @property
    def total(self) -> int:
        return self.added + self.modified + self.removed + self.renamed

    def __add__(self, other: "OperationCounts") -> "OperationCounts":
        if not isinstance(other, OperationCounts):
            return NotImplemented
        return OperationCounts(
            added=self.added + other.added,
            modified=self.modified + other.modified,
            removed=self.removed + other.removed,
            renamed=self.renamed + other.renamed,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "added": self.added,
            "modified": self.modified,
            "removed": self.removed,
            "renamed": self.renamed,
            "total": self.total,
        }


@dataclass(frozen=True)
class SpecUpdate:
    """
    One delta document paired with the base spec it targets.

    Attributes:
        source: Path to the delta spec
        target: Path to the base spec
        exists: Whether the base spec already exists on disk
    """

    source: Path
    target: Path
    exists: bool = field(default=False)

    @property
    def capability(self) -> str:
        """Directory name of the target spec (e.g. ``archive-workflow``)."""
        return self.target.parent.name
