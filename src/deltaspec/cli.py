"""
deltaspec.cli - Command-line interface.

Main entry point for the deltaspec CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from deltaspec import __version__
from deltaspec.commands import check_cmd, merge_cmd, plan_cmd


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="deltaspec",
        description="Merge ADDED/MODIFIED/REMOVED/RENAMED requirement deltas into specs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  deltaspec plan changes/x/specs/auth/spec.md             # Show delta operations
  deltaspec check changes/x/specs/auth/spec.md            # Lint a delta spec
  deltaspec check DELTA --target specs/auth/spec.md       # Also check against base
  deltaspec merge DELTA specs/auth/spec.md                # Print merged spec
  deltaspec merge DELTA specs/auth/spec.md --write        # Write merged spec

Configuration:
  .deltaspec.toml         Project settings (found by walking up to the git root)
  .deltaspec.local.toml   Local overrides beside it
  DELTASPEC_MERGE_STRICT_RENAMES=true   Environment overrides

For detailed command help: deltaspec <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"deltaspec {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (show tracebacks)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # merge command
    merge_parser = subparsers.add_parser(
        "merge",
        help="Merge a delta spec into its base spec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Operations are applied in the order RENAMED, REMOVED, MODIFIED, then
ADDED requirements are appended. A missing TARGET is created from a
skeleton; only ADDED requirements are allowed in that case.

Examples:
  deltaspec merge delta.md specs/auth/spec.md
  deltaspec merge delta.md specs/auth/spec.md --write
  deltaspec merge delta.md specs/new-cap/spec.md --capability "New Cap" --write
""",
    )
    merge_parser.add_argument(
        "delta",
        type=Path,
        help="Delta spec file",
    )
    merge_parser.add_argument(
        "target",
        type=Path,
        help="Base spec file (created if missing)",
    )
    merge_parser.add_argument(
        "--write",
        action="store_true",
        help="Write the merged spec instead of printing it",
    )
    merge_parser.add_argument(
        "--capability",
        help="Title for a newly created spec",
        metavar="NAME",
    )
    merge_parser.add_argument(
        "--strict-renames",
        action="store_true",
        help="Reject unpaired RENAMED FROM/TO lines",
    )

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Validate a delta spec without merging",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Rules:
  delta.empty              No operation sections
  section.empty            A section with no entries
  content.shall            ADDED/MODIFIED requirement without SHALL or MUST
  content.scenario         ADDED/MODIFIED requirement without a scenario
  content.scenario_format  Scenario heading not written as '#### Scenario:'
  renamed.malformed        Unpaired FROM/TO line
  renamed.duplicate        FROM or TO name used twice
  delta.conflict           Duplicate or conflicting requirement across sections
  merge.pre                Operation not applicable to --target
""",
    )
    check_parser.add_argument(
        "delta",
        type=Path,
        help="Delta spec file",
    )
    check_parser.add_argument(
        "--target",
        type=Path,
        help="Base spec to check the delta against",
        metavar="PATH",
    )
    check_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output JSON for tooling",
    )

    # plan command
    plan_parser = subparsers.add_parser(
        "plan",
        help="Show the operations a delta spec declares",
    )
    plan_parser.add_argument(
        "delta",
        type=Path,
        help="Delta spec file",
    )
    plan_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output JSON for tooling",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install deltaspec[completion]
    # Then activate: eval "$(register-python-argcomplete deltaspec)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        # Dispatch to command handlers
        if args.command == "merge":
            return merge_cmd.run(args)
        elif args.command == "check":
            return check_cmd.run(args)
        elif args.command == "plan":
            return plan_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
