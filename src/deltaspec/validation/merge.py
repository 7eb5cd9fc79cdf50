"""
deltaspec.validation.merge - Checks around the merge itself.

Pre-merge: every operation in a delta plan must be applicable to the
target's current requirement set. Post-merge: the merged document must
have unique requirement names and a scenario in every requirement.
"""

from __future__ import annotations

from pathlib import Path
from typing import Set, Union

from deltaspec.core.errors import (
    DuplicateRequirementError,
    ExistingRequirementError,
    MissingRequirementError,
    MissingScenarioError,
    PreMergeError,
    SpecStructureError,
)
from deltaspec.core.merger import NEW_SPEC_ERROR, split_spec
from deltaspec.core.models import DeltaPlan
from deltaspec.core.parser import parse_requirement_blocks, parse_scenarios
from deltaspec.core.patterns import normalize_requirement_name
from deltaspec.utilities.spec_writer import read_spec


def existing_requirement_names(base_content: str) -> Set[str]:
    """
    Normalized names of the requirements a merge can operate on.

    Only headings inside the ``## Requirements`` section count; the merge
    never touches a requirement heading in the preamble or under a later
    ``##`` section. A base without that section is scanned as a whole and
    left for the merge stage to reject.
    """
    try:
        content = split_spec(base_content).requirements
    except SpecStructureError:
        content = base_content
    return {block.key for block in parse_requirement_blocks(content)}


def validate_pre_merge_text(base_content: str, plan: DeltaPlan) -> None:
    """
    Check a plan against the text of an existing target.

    Raises:
        MissingRequirementError: MODIFIED, REMOVED or RENAMED FROM names an
            absent requirement
        ExistingRequirementError: ADDED names, or RENAMED TO collides with,
            a present requirement
    """
    existing = existing_requirement_names(base_content)

    for req in plan.modified:
        if req.key not in existing:
            raise MissingRequirementError(
                f"MODIFIED requirement {req.name!r} does not exist in base spec",
                requirement=req.name,
            )

    for name in plan.removed:
        if normalize_requirement_name(name) not in existing:
            raise MissingRequirementError(
                f"REMOVED requirement {name!r} does not exist in base spec",
                requirement=name,
            )

    for op in plan.renamed:
        if op.from_key not in existing:
            raise MissingRequirementError(
                f"RENAMED FROM requirement {op.from_name!r} does not exist in base spec",
                requirement=op.from_name,
            )
        if op.to_key in existing and op.to_key != op.from_key:
            raise ExistingRequirementError(
                f"RENAMED TO requirement {op.to_name!r} already exists in base spec",
                requirement=op.to_name,
            )

    for req in plan.added:
        if req.key in existing:
            raise ExistingRequirementError(
                f"ADDED requirement {req.name!r} already exists in base spec",
                requirement=req.name,
            )


def validate_pre_merge(
    target_path: Union[str, Path],
    plan: DeltaPlan,
    target_exists: bool,
) -> None:
    """
    Check that a delta plan can be applied to its target.

    Args:
        target_path: Base spec path (read only when it exists)
        plan: Parsed delta plan
        target_exists: Whether the base spec exists

    Raises:
        PreMergeError: If any operation is inapplicable
        OSError: If an existing target cannot be read
    """
    if not target_exists:
        if plan.modified or plan.removed or plan.renamed:
            raise PreMergeError(NEW_SPEC_ERROR)
        return

    base_content = read_spec(target_path)
    validate_pre_merge_text(base_content, plan)


def validate_post_merge(merged_content: str) -> None:
    """
    Final integrity gate before merged text may be persisted.

    Raises:
        DuplicateRequirementError: Two requirements share a normalized name
        MissingScenarioError: A requirement has no ``#### Scenario:``
    """
    blocks = parse_requirement_blocks(merged_content)

    seen: Set[str] = set()
    for block in blocks:
        if block.key in seen:
            raise DuplicateRequirementError(
                f"duplicate requirement name in merged spec: {block.name!r}",
                requirement=block.name,
            )
        seen.add(block.key)

    for block in blocks:
        if not parse_scenarios(block.raw_content):
            raise MissingScenarioError(
                f"requirement {block.name!r} has no scenarios",
                requirement=block.name,
            )
