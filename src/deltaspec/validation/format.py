"""Format validation - Lint delta specs against configurable authoring rules.

Validates delta documents against rules defined in [rules.delta] config section:
- require_shall: ADDED/MODIFIED requirements must use SHALL or MUST
- require_scenarios: ADDED/MODIFIED requirements must have a scenario

Structural rules are always on:
- delta.empty: the document has no operation sections
- section.empty: a present section has no entries
- content.scenario_format: scenarios written with the wrong heading
- renamed.malformed: unpaired FROM/TO lines
- renamed.duplicate: a FROM or TO name used twice

Violations are reported, never raised. The merge pipeline does not
consult them; they exist for the ``check`` command.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Set

from deltaspec.core.delta import find_delta_section
from deltaspec.core.parser import DELTA_CLOSING_KINDS, parse_requirement_blocks, parse_scenarios
from deltaspec.core.patterns import (
    DELTA_SECTIONS,
    RENAME_FROM_PATTERN,
    RENAME_TO_PATTERN,
    normalize_requirement_name,
    requirement_name,
    split_lines,
)

SHALL_MUST_PATTERN = re.compile(r"\b(shall|must)\b", re.IGNORECASE)
MALFORMED_SCENARIO_PATTERN = re.compile(
    r"^(#{1,3}|#{5,})\s*Scenario:|^\*\*Scenario:?\*\*|^-\s*\*\*Scenario", re.IGNORECASE
)


class Severity(Enum):
    """Severity level for lint violations."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class DeltaRulesConfig:
    """Configuration for delta authoring rules."""

    require_shall: bool = True
    require_scenarios: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeltaRulesConfig":
        """Create DeltaRulesConfig from the [rules.delta] config section."""
        return cls(
            require_shall=data.get("require_shall", True),
            require_scenarios=data.get("require_scenarios", True),
        )


@dataclass
class DeltaViolation:
    """
    A lint finding in a delta document.

    Attributes:
        rule: Rule identifier (e.g., "content.shall")
        message: Human-readable description
        severity: ERROR or WARNING
        section: Delta section keyword, empty for document-level findings
        requirement: Requirement name the finding refers to, if any
    """

    rule: str
    message: str
    severity: Severity = Severity.ERROR
    section: str = ""
    requirement: str = ""

    def __str__(self) -> str:
        prefix = "❌ ERROR" if self.severity is Severity.ERROR else "⚠️ WARNING"
        where = self.section
        if self.requirement:
            where = f"{where} Requirement {self.requirement!r}".strip()
        return f"{prefix} [{self.rule}] {where}\n   {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {
            "rule": self.rule,
            "message": self.message,
            "severity": self.severity.value,
            "section": self.section,
            "requirement": self.requirement,
        }


def has_malformed_scenarios(content: str) -> bool:
    """Detect scenario headings that do not use ``#### Scenario:``."""
    return any(
        MALFORMED_SCENARIO_PATTERN.match(line.strip()) for line, _ in split_lines(content)
    )


def _lint_block_section(text: str, section: str, rules: DeltaRulesConfig) -> List[DeltaViolation]:
    violations: List[DeltaViolation] = []
    blocks = parse_requirement_blocks(text, closing=DELTA_CLOSING_KINDS)

    if not blocks:
        violations.append(
            DeltaViolation(
                rule="section.empty",
                message=f"{section} Requirements section is empty (no requirements found)",
                section=section,
            )
        )
        return violations

    for block in blocks:
        body = block.raw_content[len(block.header_line) :]
        scenarios = parse_scenarios(block.raw_content)

        if rules.require_shall and not SHALL_MUST_PATTERN.search(body):
            violations.append(
                DeltaViolation(
                    rule="content.shall",
                    message=f"{section} requirement must contain SHALL or MUST",
                    section=section,
                    requirement=block.name,
                )
            )

        if not scenarios and has_malformed_scenarios(body):
            violations.append(
                DeltaViolation(
                    rule="content.scenario_format",
                    message="Scenarios must use '#### Scenario:' format "
                    "(4 hashtags followed by 'Scenario:')",
                    section=section,
                    requirement=block.name,
                )
            )
        elif rules.require_scenarios and not scenarios:
            violations.append(
                DeltaViolation(
                    rule="content.scenario",
                    message=f"{section} requirement must have at least one scenario",
                    section=section,
                    requirement=block.name,
                )
            )

    return violations


def _lint_removed_section(text: str) -> List[DeltaViolation]:
    names = [requirement_name(line.strip()) for line, _ in split_lines(text)]
    if any(name is not None for name in names):
        return []
    return [
        DeltaViolation(
            rule="section.empty",
            message="REMOVED Requirements section is empty (no requirements found)",
            section="REMOVED",
        )
    ]


def _lint_renamed_section(text: str) -> List[DeltaViolation]:
    violations: List[DeltaViolation] = []
    pending = None
    pairs = 0
    seen_from: Set[str] = set()
    seen_to: Set[str] = set()
    malformed = DeltaViolation(
        rule="renamed.malformed",
        message="Malformed RENAMED requirement (expected format: "
        "'- FROM: `### Requirement: OldName`' followed by "
        "'- TO: `### Requirement: NewName`')",
        section="RENAMED",
    )

    for raw_line, _ in split_lines(text):
        line = raw_line.strip()
        from_match = RENAME_FROM_PATTERN.match(line)
        if from_match:
            if pending is not None:
                violations.append(malformed)
            pending = from_match.group("name").strip()
            continue
        to_match = RENAME_TO_PATTERN.match(line)
        if not to_match:
            continue
        if pending is None:
            violations.append(malformed)
            continue

        to_name = to_match.group("name").strip()
        pairs += 1
        for name, seen, label in ((pending, seen_from, "FROM"), (to_name, seen_to, "TO")):
            key = normalize_requirement_name(name)
            if key in seen:
                violations.append(
                    DeltaViolation(
                        rule="renamed.duplicate",
                        message=f"Duplicate {label} requirement name in RENAMED section: {name!r}",
                        section="RENAMED",
                        requirement=name,
                    )
                )
            seen.add(key)
        pending = None

    if pending is not None:
        violations.append(malformed)

    if pairs == 0 and not violations:
        violations.append(
            DeltaViolation(
                rule="section.empty",
                message="RENAMED Requirements section is empty (no rename pairs found)",
                section="RENAMED",
            )
        )

    return violations


def lint_delta_text(content: str, rules: DeltaRulesConfig | None = None) -> List[DeltaViolation]:
    """
    Lint a delta document.

    Args:
        content: Delta document text
        rules: Authoring rules (defaults apply when omitted)

    Returns:
        List of DeltaViolation objects (empty if clean)
    """
    rules = rules or DeltaRulesConfig()
    violations: List[DeltaViolation] = []
    found_any = False

    for keyword in DELTA_SECTIONS:
        section = find_delta_section(content, keyword)
        if section is None:
            continue
        found_any = True
        if keyword in ("ADDED", "MODIFIED"):
            violations.extend(_lint_block_section(section.text, keyword, rules))
        elif keyword == "REMOVED":
            violations.extend(_lint_removed_section(section.text))
        else:
            violations.extend(_lint_renamed_section(section.text))

    if not found_any:
        violations.append(
            DeltaViolation(
                rule="delta.empty",
                message="Delta spec must have at least one ADDED, MODIFIED, "
                "REMOVED or RENAMED Requirements section",
            )
        )

    return violations
