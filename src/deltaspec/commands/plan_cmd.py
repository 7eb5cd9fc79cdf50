"""
deltaspec.commands.plan_cmd - Show the operations a delta spec declares.
"""

import argparse
import json

from deltaspec.commands.merge_cmd import load_configuration
from deltaspec.core.delta import parse_delta_file
from deltaspec.core.models import DeltaPlan


def run(args: argparse.Namespace) -> int:
    """Run the plan command."""
    config = load_configuration(args)
    if config is None:
        return 1

    plan = parse_delta_file(
        args.delta, strict_renames=bool(config.get("merge.strict_renames", False))
    )

    if args.json:
        output = plan.to_dict()
        output["operations"] = plan.count_operations()
        print(json.dumps(output, indent=2))
        return 0

    print(format_plan(plan))
    return 0


def format_plan(plan: DeltaPlan) -> str:
    """Render a plan as one line per operation, grouped by section."""
    lines = []

    if plan.added:
        lines.append(f"ADDED ({len(plan.added)})")
        lines.extend(f"  + {req.name}" for req in plan.added)
    if plan.modified:
        lines.append(f"MODIFIED ({len(plan.modified)})")
        lines.extend(f"  ~ {req.name}" for req in plan.modified)
    if plan.removed:
        lines.append(f"REMOVED ({len(plan.removed)})")
        lines.extend(f"  - {name}" for name in plan.removed)
    if plan.renamed:
        lines.append(f"RENAMED ({len(plan.renamed)})")
        lines.extend(f"  → {op.from_name} -> {op.to_name}" for op in plan.renamed)

    if not lines:
        return "No operations"

    lines.append(f"{plan.count_operations()} operations")
    return "\n".join(lines)
