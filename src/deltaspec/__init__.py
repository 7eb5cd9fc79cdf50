"""
deltaspec - Delta spec merging for requirement documents

deltaspec applies ADDED/MODIFIED/REMOVED/RENAMED requirement deltas to
persistent base specifications, validating both documents before and
after the merge so that only consistent output reaches disk.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("deltaspec")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from deltaspec.core.delta import parse_delta_file, parse_delta_text
from deltaspec.core.merger import merge_spec
from deltaspec.core.models import (
    DeltaPlan,
    OperationCounts,
    RenameOp,
    RequirementBlock,
    SpecUpdate,
)
from deltaspec.core.parser import parse_requirement_blocks

__all__ = [
    "__version__",
    "DeltaPlan",
    "OperationCounts",
    "RenameOp",
    "RequirementBlock",
    "SpecUpdate",
    "merge_spec",
    "parse_delta_file",
    "parse_delta_text",
    "parse_requirement_blocks",
]
