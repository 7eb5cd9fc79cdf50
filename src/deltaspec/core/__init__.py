"""
deltaspec.core - Document model, parsers and the merge engine
"""

from deltaspec.core.models import (
    DeltaPlan,
    OperationCounts,
    RenameOp,
    RequirementBlock,
    SpecUpdate,
)
from deltaspec.core.patterns import LineKind, classify_line, normalize_requirement_name

__all__ = [
    "DeltaPlan",
    "LineKind",
    "OperationCounts",
    "RenameOp",
    "RequirementBlock",
    "SpecUpdate",
    "classify_line",
    "normalize_requirement_name",
]
