"""
deltaspec.core.errors - Exception hierarchy for delta merging.

Every validation failure halts the merge pipeline; nothing here is ever
downgraded to a warning. File system errors are not wrapped: ``OSError``
already carries the offending path and propagates as-is.
"""

from __future__ import annotations

from typing import Optional


class DeltaSpecError(Exception):
    """Base class for all deltaspec errors."""


class DeltaParseError(DeltaSpecError):
    """A delta document could not be parsed in strict mode."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class DeltaConflictError(DeltaSpecError):
    """A delta plan contradicts itself (duplicates or cross-section conflicts)."""

    def __init__(self, message: str, requirement: str, sections: tuple[str, ...]):
        self.requirement = requirement
        self.sections = sections
        super().__init__(message)


class EmptyDeltaError(DeltaSpecError):
    """A delta document declares no operations."""

    def __init__(self, message: str = "delta spec has no operations"):
        super().__init__(message)


class PreMergeError(DeltaSpecError):
    """A delta operation is not applicable to the target's current state."""

    def __init__(self, message: str, requirement: Optional[str] = None):
        self.requirement = requirement
        super().__init__(message)


class MissingRequirementError(PreMergeError):
    """MODIFIED/REMOVED/RENAMED names a requirement the target lacks."""


class ExistingRequirementError(PreMergeError):
    """ADDED or RENAMED TO names a requirement the target already has."""


class SpecStructureError(DeltaSpecError):
    """A base document lacks the structure the merge relies on."""


class PostMergeError(DeltaSpecError):
    """The merged document failed its integrity check."""

    def __init__(self, message: str, requirement: str):
        self.requirement = requirement
        super().__init__(message)


class DuplicateRequirementError(PostMergeError):
    """Two requirements in the merged document share a normalized name."""


class MissingScenarioError(PostMergeError):
    """A requirement in the merged document has no scenario."""


class SpecUpdateError(DeltaSpecError):
    """A stage of the merge pipeline failed for one delta document."""

    def __init__(self, stage: str, source: object, cause: Exception):
        self.stage = stage
        self.source = source
        self.cause = cause
        super().__init__(f"{stage} failed for {source}: {cause}")


class DuplicateTargetError(DeltaSpecError):
    """Two updates in one batch write the same target spec."""

    def __init__(self, target: object):
        self.target = target
        super().__init__(f"target {target} is already updated earlier in this batch")
