"""
deltaspec.validation - Delta consistency, pre/post-merge checks and lint
"""

from deltaspec.validation.delta import check_duplicates_and_conflicts
from deltaspec.validation.format import DeltaRulesConfig, DeltaViolation, Severity, lint_delta_text
from deltaspec.validation.merge import (
    validate_post_merge,
    validate_pre_merge,
    validate_pre_merge_text,
)

__all__ = [
    "DeltaRulesConfig",
    "DeltaViolation",
    "Severity",
    "check_duplicates_and_conflicts",
    "lint_delta_text",
    "validate_post_merge",
    "validate_pre_merge",
    "validate_pre_merge_text",
]
