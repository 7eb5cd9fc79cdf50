"""
deltaspec.commands.check_cmd - Validate a delta spec without merging.

Runs the authoring lint, the consistency checks and, when a target is
given, the pre-merge checks against it.
"""

import argparse
import json
import sys
from typing import List

from deltaspec.commands.merge_cmd import load_configuration
from deltaspec.core.delta import parse_delta_text
from deltaspec.core.errors import DeltaConflictError, DeltaParseError, PreMergeError
from deltaspec.utilities.spec_writer import read_spec
from deltaspec.validation.delta import check_duplicates_and_conflicts
from deltaspec.validation.format import (
    DeltaRulesConfig,
    DeltaViolation,
    Severity,
    lint_delta_text,
)
from deltaspec.validation.merge import validate_pre_merge


def run(args: argparse.Namespace) -> int:
    """
    Run the check command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 if no errors, 1 otherwise)
    """
    config = load_configuration(args)
    if config is None:
        return 1

    content = read_spec(args.delta)
    rules = DeltaRulesConfig.from_dict(config.get("rules.delta", {}))
    strict_renames = bool(config.get("merge.strict_renames", False))

    violations = lint_delta_text(content, rules)
    violations.extend(check_plan(content, args.target, strict_renames))

    errors = [v for v in violations if v.severity is Severity.ERROR]
    warnings = [v for v in violations if v.severity is Severity.WARNING]

    if args.json:
        output = {
            "valid": not errors,
            "errors": [v.to_dict() for v in errors],
            "warnings": [v.to_dict() for v in warnings],
        }
        print(json.dumps(output, indent=2))
        return 1 if errors else 0

    if violations and not args.quiet:
        print()
        for violation in violations:
            print(violation)
            print()

    if not args.quiet:
        print("─" * 60)
        if errors:
            print(f"❌ {len(errors)} errors")
        if warnings:
            print(f"⚠️  {len(warnings)} warnings")
        if not violations:
            print(f"✓ {args.delta} is valid")

    return 1 if errors else 0


def check_plan(content: str, target, strict_renames: bool) -> List[DeltaViolation]:
    """
    Parse the delta and run the checks the merge pipeline would run.

    Stops at the first failing check, as the pipeline does.
    """
    try:
        plan = parse_delta_text(content, strict_renames=strict_renames)
    except DeltaParseError as e:
        return [DeltaViolation(rule="delta.parse", message=str(e), section="RENAMED")]

    try:
        check_duplicates_and_conflicts(plan)
    except DeltaConflictError as e:
        return [DeltaViolation(rule="delta.conflict", message=str(e), requirement=e.requirement)]

    if target is None:
        return []

    try:
        validate_pre_merge(target, plan, target.is_file())
    except PreMergeError as e:
        return [
            DeltaViolation(rule="merge.pre", message=str(e), requirement=e.requirement or "")
        ]

    return []
