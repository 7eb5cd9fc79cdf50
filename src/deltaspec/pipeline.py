"""
deltaspec.pipeline - End-to-end processing of delta spec updates.

Each update runs through the same stages::

    parse delta spec -> delta validation -> pre-merge validation
        -> merge -> post-merge validation

A failure in any stage stops that update and is re-raised as
SpecUpdateError naming the stage and the delta document. Batches are
all-or-nothing: merged text is only returned when every update passed,
and nothing is written here. Persisting is a separate step
(``write_specs``) so callers can preview first.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from deltaspec.core.delta import parse_delta_file
from deltaspec.core.errors import DeltaSpecError, DuplicateTargetError, SpecUpdateError
from deltaspec.core.merger import apply_delta_plan
from deltaspec.core.models import OperationCounts, SpecUpdate
from deltaspec.utilities import spec_writer
from deltaspec.validation.delta import check_duplicates_and_conflicts
from deltaspec.validation.merge import validate_post_merge, validate_pre_merge

STAGE_BATCH = "batch validation"
STAGE_PARSE = "parse delta spec"
STAGE_DELTA = "delta validation"
STAGE_PRE_MERGE = "pre-merge validation"
STAGE_MERGE = "merge"
STAGE_POST_MERGE = "post-merge validation"


def build_update(delta_path: Union[str, Path], target_path: Union[str, Path]) -> SpecUpdate:
    """Pair a delta document with its target, checking whether the target exists."""
    target = Path(target_path)
    return SpecUpdate(source=Path(delta_path), target=target, exists=target.is_file())


def process_update(
    update: SpecUpdate,
    strict_renames: bool = False,
    capability: Optional[str] = None,
) -> Tuple[str, OperationCounts]:
    """
    Run one update through every stage.

    Args:
        update: Delta/target pair
        strict_renames: Reject unpaired RENAMED lines while parsing
        capability: Title for a newly created spec (derived from the
            target directory when None)

    Returns:
        Tuple of (merged text, operation counts)

    Raises:
        SpecUpdateError: If any stage fails; ``__cause__`` holds the
            original error
        OSError: If a file cannot be read
    """
    stage = STAGE_PARSE
    try:
        plan = parse_delta_file(update.source, strict_renames=strict_renames)

        stage = STAGE_DELTA
        check_duplicates_and_conflicts(plan)

        stage = STAGE_PRE_MERGE
        validate_pre_merge(update.target, plan, update.exists)

        stage = STAGE_MERGE
        merged, counts = apply_delta_plan(plan, update.target, update.exists, capability)

        stage = STAGE_POST_MERGE
        validate_post_merge(merged)
    except DeltaSpecError as err:
        raise SpecUpdateError(stage, update.source, err) from err

    return merged, counts


def check_unique_targets(updates: Iterable[SpecUpdate]) -> None:
    """
    Reject a batch in which two updates share a target spec.

    Each update is merged against the target as it is on disk, so a second
    delta for the same target would silently discard the first.

    Raises:
        SpecUpdateError: Naming the later delta of the first duplicate pair
    """
    seen = set()
    for update in updates:
        key = update.target.resolve()
        if key in seen:
            err = DuplicateTargetError(update.target)
            raise SpecUpdateError(STAGE_BATCH, update.source, err) from err
        seen.add(key)


def process_updates(
    updates: Iterable[SpecUpdate],
    strict_renames: bool = False,
    capability: Optional[str] = None,
) -> Tuple[OperationCounts, Dict[Path, str]]:
    """
    Process a batch of updates, stopping at the first failure.

    Args:
        updates: Delta/target pairs, at most one per target
        strict_renames: Reject unpaired RENAMED lines while parsing
        capability: Title for every newly created spec in the batch

    Returns:
        Tuple of (summed counts, merged text keyed by target path)

    Raises:
        SpecUpdateError: From the first failing update, or before any
            merge when two updates share a target; no partial result is
            returned
    """
    updates = list(updates)
    check_unique_targets(updates)

    totals = OperationCounts()
    merged: Dict[Path, str] = {}

    for update in updates:
        text, counts = process_update(
            update, strict_renames=strict_renames, capability=capability
        )
        merged[update.target] = text
        totals = totals + counts

    return totals, merged


def write_specs(merged: Mapping[Path, str]) -> List[Path]:
    """Persist merged specs atomically, creating parent directories."""
    return spec_writer.write_specs(merged)


def format_summary(counts: OperationCounts) -> str:
    """
    Render operation counts as summary lines.

    Zero counters are omitted; the total line is always present.
    """
    lines = []
    if counts.added:
        lines.append(f"+ {counts.added} added")
    if counts.modified:
        lines.append(f"~ {counts.modified} modified")
    if counts.removed:
        lines.append(f"- {counts.removed} removed")
    if counts.renamed:
        lines.append(f"→ {counts.renamed} renamed")
    lines.append(f"= {counts.total} total")
    return "\n".join(lines)
