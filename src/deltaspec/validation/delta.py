"""
deltaspec.validation.delta - Internal consistency of a delta plan.

Checks a plan on its own, without any base document: no duplicate names
inside ADDED or MODIFIED, and no name claimed by two sections whose
operations contradict each other. The first violation raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Set

from deltaspec.core.errors import DeltaConflictError
from deltaspec.core.models import DeltaPlan, RequirementBlock
from deltaspec.core.patterns import normalize_requirement_name


@dataclass
class NameSets:
    """Normalized names claimed by each part of a delta plan."""

    added: Set[str] = field(default_factory=set)
    modified: Set[str] = field(default_factory=set)
    removed: Set[str] = field(default_factory=set)
    renamed_from: Set[str] = field(default_factory=set)
    renamed_to: Set[str] = field(default_factory=set)

    @classmethod
    def from_plan(cls, plan: DeltaPlan) -> "NameSets":
        sets = cls()
        sets.added = {req.key for req in plan.added}
        sets.modified = {req.key for req in plan.modified}
        sets.removed = {normalize_requirement_name(name) for name in plan.removed}
        sets.renamed_from = {op.from_key for op in plan.renamed}
        sets.renamed_to = {op.to_key for op in plan.renamed}
        return sets


# (left section, right section) pairs that may not share a name, in the
# order they are checked.
CONFLICTING_SECTIONS = (
    ("ADDED", "MODIFIED"),
    ("ADDED", "REMOVED"),
    ("ADDED", "RENAMED TO"),
    ("MODIFIED", "REMOVED"),
    ("MODIFIED", "RENAMED FROM"),
    ("REMOVED", "RENAMED FROM"),
)

_SECTION_ATTRS = {
    "ADDED": "added",
    "MODIFIED": "modified",
    "REMOVED": "removed",
    "RENAMED FROM": "renamed_from",
    "RENAMED TO": "renamed_to",
}


def check_duplicates_in_section(reqs: Iterable[RequirementBlock], section: str) -> None:
    """
    Reject two blocks of one section sharing a normalized name.

    Raises:
        DeltaConflictError: On the first duplicate, naming it as written
    """
    seen: Set[str] = set()
    for req in reqs:
        if req.key in seen:
            raise DeltaConflictError(
                f"duplicate requirement {req.name!r} in {section} section",
                requirement=req.name,
                sections=(section, section),
            )
        seen.add(req.key)


def _display_name(plan: DeltaPlan, key: str) -> str:
    """Recover a requirement's name as written in the plan."""
    for req in plan.added + plan.modified:
        if req.key == key:
            return req.name
    for name in plan.removed:
        if normalize_requirement_name(name) == key:
            return name
    for op in plan.renamed:
        if op.from_key == key:
            return op.from_name
        if op.to_key == key:
            return op.to_name
    return key


def check_cross_section_conflicts(plan: DeltaPlan) -> None:
    """
    Reject names that appear in two contradicting sections.

    Raises:
        DeltaConflictError: Naming the requirement and both sections
    """
    sets = NameSets.from_plan(plan)
    for left, right in CONFLICTING_SECTIONS:
        left_names = getattr(sets, _SECTION_ATTRS[left])
        right_names = getattr(sets, _SECTION_ATTRS[right])
        shared = left_names & right_names
        if not shared:
            continue
        # Report the first shared name in left-section document order.
        key = next(k for k in _ordered_keys(plan, left) if k in shared)
        name = _display_name(plan, key)
        raise DeltaConflictError(
            f"requirement {name!r} appears in both {left} and {right} sections",
            requirement=name,
            sections=(left, right),
        )


def _ordered_keys(plan: DeltaPlan, section: str) -> list[str]:
    if section == "ADDED":
        return [req.key for req in plan.added]
    if section == "MODIFIED":
        return [req.key for req in plan.modified]
    if section == "REMOVED":
        return [normalize_requirement_name(name) for name in plan.removed]
    if section == "RENAMED FROM":
        return [op.from_key for op in plan.renamed]
    return [op.to_key for op in plan.renamed]


def check_duplicates_and_conflicts(plan: DeltaPlan) -> None:
    """
    Validate a delta plan's internal consistency.

    Rules, first violation wins:
        1. no duplicate names within ADDED
        2. no duplicate names within MODIFIED
        3-8. no name shared by ADDED/MODIFIED, ADDED/REMOVED,
             ADDED/RENAMED TO, MODIFIED/REMOVED, MODIFIED/RENAMED FROM,
             REMOVED/RENAMED FROM

    Raises:
        DeltaConflictError: Describing the first violation
    """
    check_duplicates_in_section(plan.added, "ADDED")
    check_duplicates_in_section(plan.modified, "MODIFIED")
    check_cross_section_conflicts(plan)
