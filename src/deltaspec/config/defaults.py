"""
deltaspec.config.defaults - Default configuration values
"""

DEFAULT_CONFIG = {
    "merge": {
        # Reject RENAMED TO lines without a FROM, and FROM lines without a TO
        "strict_renames": False,
        # Title for newly created specs; derived from the directory when empty
        "capability_title": "",
    },
    "rules": {
        "delta": {
            "require_shall": True,
            "require_scenarios": True,
        },
    },
}
