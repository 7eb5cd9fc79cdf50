"""
deltaspec.commands - CLI command implementations
"""

__all__ = [
    "check_cmd",
    "merge_cmd",
    "plan_cmd",
]
