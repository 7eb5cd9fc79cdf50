"""Tests for deltaspec.pipeline - staged processing of delta updates."""

from pathlib import Path

import pytest

from deltaspec.core.errors import (
    DeltaConflictError,
    DeltaParseError,
    DuplicateTargetError,
    EmptyDeltaError,
    MissingRequirementError,
    MissingScenarioError,
    SpecStructureError,
    SpecUpdateError,
)
from deltaspec.core.models import OperationCounts
from deltaspec.core.parser import parse_requirement_blocks
from deltaspec.pipeline import (
    build_update,
    format_summary,
    process_update,
    process_updates,
    write_specs,
)

BASE_SPEC = """\
# Auth Specification

## Purpose

Authentication.

## Requirements

### Requirement: Login
The system SHALL log users in.

#### Scenario: Valid login
- **THEN** a session exists
"""

ADD_LOGOUT = """\
## ADDED Requirements

### Requirement: Logout
The system SHALL log users out.

#### Scenario: Logout
- **THEN** the session ends
"""

RENAME_LOGIN = """\
## RENAMED Requirements

- FROM: `### Requirement: Login`
- TO: `### Requirement: Sign In`
"""


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    """A base spec at specs/auth/spec.md."""
    target = tmp_path / "specs" / "auth" / "spec.md"
    target.parent.mkdir(parents=True)
    target.write_text(BASE_SPEC, encoding="utf-8")
    return tmp_path


def _delta(root: Path, text: str, name: str = "auth") -> Path:
    path = root / "changes" / "feature" / "specs" / name / "spec.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestBuildUpdate:
    """Tests for build_update."""

    def test_existing_target(self, workspace: Path):
        update = build_update(_delta(workspace, ADD_LOGOUT), workspace / "specs/auth/spec.md")
        assert update.exists is True
        assert update.capability == "auth"

    def test_missing_target(self, workspace: Path):
        update = build_update(_delta(workspace, ADD_LOGOUT), workspace / "specs/new/spec.md")
        assert update.exists is False


class TestProcessUpdate:
    """Tests for process_update."""

    def test_success(self, workspace: Path):
        target = workspace / "specs" / "auth" / "spec.md"
        update = build_update(_delta(workspace, ADD_LOGOUT), target)

        merged, counts = process_update(update)

        assert [b.name for b in parse_requirement_blocks(merged)] == ["Login", "Logout"]
        assert counts == OperationCounts(added=1)
        assert target.read_text(encoding="utf-8") == BASE_SPEC

    def test_new_capability(self, workspace: Path):
        target = workspace / "specs" / "two-factor" / "spec.md"
        update = build_update(_delta(workspace, ADD_LOGOUT, "two-factor"), target)

        merged, counts = process_update(update)

        assert merged.startswith("# Two Factor Specification\n")
        assert counts.added == 1

    def test_capability_override(self, workspace: Path):
        target = workspace / "specs" / "two-factor" / "spec.md"
        update = build_update(_delta(workspace, ADD_LOGOUT, "two-factor"), target)
        merged, _ = process_update(update, capability="2FA")
        assert merged.startswith("# 2FA Specification\n")

    @pytest.mark.parametrize(
        "delta, stage, cause",
        [
            (
                "## RENAMED Requirements\n- TO: `### Requirement: X`\n",
                "parse delta spec",
                DeltaParseError,
            ),
            (
                "## ADDED Requirements\n### Requirement: A\nSHALL\n#### Scenario: S\n- x\n"
                "## REMOVED Requirements\n### Requirement: A\n",
                "delta validation",
                DeltaConflictError,
            ),
            (
                "## REMOVED Requirements\n### Requirement: Profile\n",
                "pre-merge validation",
                MissingRequirementError,
            ),
            ("# No sections\n", "merge", EmptyDeltaError),
            (
                "## ADDED Requirements\n### Requirement: Profile\nThe system SHALL show it.\n",
                "post-merge validation",
                MissingScenarioError,
            ),
        ],
    )
    def test_stage_failures(self, workspace: Path, delta, stage, cause):
        delta_path = _delta(workspace, delta)
        update = build_update(delta_path, workspace / "specs" / "auth" / "spec.md")

        with pytest.raises(SpecUpdateError) as exc_info:
            process_update(update, strict_renames=True)

        error = exc_info.value
        assert error.stage == stage
        assert error.source == delta_path
        assert isinstance(error.cause, cause)
        assert error.__cause__ is error.cause
        assert str(error).startswith(f"{stage} failed for {delta_path}: ")

    def test_base_without_requirements_section(self, workspace: Path):
        target = workspace / "specs" / "auth" / "spec.md"
        target.write_text("# Auth\n\n### Requirement: Login\nSHALL\n", encoding="utf-8")
        update = build_update(
            _delta(workspace, "## REMOVED Requirements\n### Requirement: Login\n"), target
        )
        with pytest.raises(SpecUpdateError) as exc_info:
            process_update(update)
        assert exc_info.value.stage == "merge"
        assert isinstance(exc_info.value.cause, SpecStructureError)

    def test_requirement_outside_requirements_section(self, workspace: Path):
        target = workspace / "specs" / "auth" / "spec.md"
        target.write_text(
            BASE_SPEC + "\n## Notes\n\n### Requirement: Archived\nold\n", encoding="utf-8"
        )
        update = build_update(
            _delta(workspace, "## REMOVED Requirements\n### Requirement: Archived\n"), target
        )
        with pytest.raises(SpecUpdateError) as exc_info:
            process_update(update)
        assert exc_info.value.stage == "pre-merge validation"
        assert isinstance(exc_info.value.cause, MissingRequirementError)

    def test_missing_delta_file_not_wrapped(self, workspace: Path):
        update = build_update(workspace / "nope.md", workspace / "specs" / "auth" / "spec.md")
        with pytest.raises(FileNotFoundError):
            process_update(update)


class TestProcessUpdates:
    """Tests for process_updates."""

    def test_totals_and_results(self, workspace: Path):
        auth_target = workspace / "specs" / "auth" / "spec.md"
        new_target = workspace / "specs" / "billing" / "spec.md"
        updates = [
            build_update(_delta(workspace, ADD_LOGOUT), auth_target),
            build_update(
                _delta(
                    workspace,
                    "## ADDED Requirements\n### Requirement: Invoice\nSHALL\n#### Scenario: S\n- x\n"
                    "### Requirement: Refund\nSHALL\n#### Scenario: R\n- y\n",
                    "billing",
                ),
                new_target,
            ),
        ]

        totals, merged = process_updates(updates)

        assert totals == OperationCounts(added=3)
        assert list(merged) == [auth_target, new_target]

    def test_all_or_nothing(self, workspace: Path):
        auth_target = workspace / "specs" / "auth" / "spec.md"
        updates = [
            build_update(_delta(workspace, ADD_LOGOUT), auth_target),
            build_update(
                _delta(workspace, "## REMOVED Requirements\n### Requirement: X\n", "other"),
                workspace / "specs" / "other" / "spec.md",
            ),
        ]
        with pytest.raises(SpecUpdateError, match="pre-merge validation"):
            process_updates(updates)

    def test_duplicate_targets_rejected(self, workspace: Path):
        auth_target = workspace / "specs" / "auth" / "spec.md"
        second = _delta(workspace, RENAME_LOGIN, "auth-rename")
        updates = [
            build_update(_delta(workspace, ADD_LOGOUT), auth_target),
            build_update(second, auth_target),
        ]

        with pytest.raises(SpecUpdateError) as exc_info:
            process_updates(updates)

        error = exc_info.value
        assert error.stage == "batch validation"
        assert error.source == second
        assert isinstance(error.cause, DuplicateTargetError)
        assert auth_target.read_text(encoding="utf-8") == BASE_SPEC

    def test_capability_forwarded(self, workspace: Path):
        target = workspace / "specs" / "billing" / "spec.md"
        updates = [
            build_update(
                _delta(
                    workspace,
                    "## ADDED Requirements\n### Requirement: Invoice\nSHALL\n#### Scenario: S\n- x\n",
                    "billing",
                ),
                target,
            )
        ]

        _, merged = process_updates(updates, capability="Payments")

        assert merged[target].startswith("# Payments Specification\n")


class TestWriteSpecs:
    """Tests for write_specs."""

    def test_writes_merged(self, workspace: Path):
        target = workspace / "specs" / "auth" / "spec.md"
        _, merged = process_updates([build_update(_delta(workspace, ADD_LOGOUT), target)])

        written = write_specs(merged)

        assert written == [target]
        assert "### Requirement: Logout" in target.read_text(encoding="utf-8")


class TestFormatSummary:
    """Tests for format_summary."""

    def test_all_counters(self):
        counts = OperationCounts(added=1, modified=2, removed=3, renamed=4)
        assert format_summary(counts) == (
            "+ 1 added\n~ 2 modified\n- 3 removed\n→ 4 renamed\n= 10 total"
        )

    def test_zero_counters_omitted(self):
        assert format_summary(OperationCounts(removed=2)) == "- 2 removed\n= 2 total"

    def test_empty(self):
        assert format_summary(OperationCounts()) == "= 0 total"
