"""
deltaspec.commands.merge_cmd - Merge a delta spec into its base spec.

Prints the merged document by default; ``--write`` persists it and
prints the operation summary instead.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from deltaspec.config import ConfigLoader, get_config, validate_config
from deltaspec.core.errors import SpecUpdateError
from deltaspec.pipeline import build_update, format_summary, process_update, write_specs


def run(args: argparse.Namespace) -> int:
    """
    Run the merge command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 if any stage failed)
    """
    config = load_configuration(args)
    if config is None:
        return 1

    strict_renames = args.strict_renames or bool(config.get("merge.strict_renames", False))
    capability = args.capability or config.get("merge.capability_title") or None

    update = build_update(args.delta, args.target)

    try:
        merged, counts = process_update(
            update, strict_renames=strict_renames, capability=capability
        )
    except SpecUpdateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.write:
        sys.stdout.write(merged)
        return 0

    write_specs({update.target: merged})

    if not args.quiet:
        action = "Updated" if update.exists else "Created"
        print(f"{action} {update.target}")
        print(format_summary(counts))

    return 0


def load_configuration(args: argparse.Namespace) -> Optional[ConfigLoader]:
    """Load configuration from ``--config``, discovery, or defaults."""
    config_path: Optional[Path] = getattr(args, "config", None)
    if config_path is not None and not config_path.exists():
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        return None

    try:
        config = get_config(config_path)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None

    errors = validate_config(config.get_raw())
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return None

    return config
