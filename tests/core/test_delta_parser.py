"""Tests for deltaspec.core.delta - delta plan parsing."""

from pathlib import Path

import pytest

from deltaspec.core.delta import (
    find_delta_section,
    parse_delta_file,
    parse_delta_text,
    parse_removed_section,
    parse_renamed_section,
)
from deltaspec.core.errors import DeltaParseError

FULL_DELTA = """\
# Delta for Auth

## ADDED Requirements

### Requirement: Two Factor
The system SHALL require a second factor.

#### Scenario: OTP
- **WHEN** a code is entered
- **THEN** it is verified

## MODIFIED Requirements

### Requirement: Login
The system SHALL log users in with rate limiting.

#### Scenario: Lockout
- **WHEN** five attempts fail
- **THEN** the account is locked

## REMOVED Requirements

### Requirement: Remember Me
**Reason**: Replaced by sessions
**Migration**: None

## RENAMED Requirements

- FROM: `### Requirement: Logout`
- TO: `### Requirement: Sign Out`
"""


class TestFindDeltaSection:
    """Tests for find_delta_section."""

    def test_missing_section(self):
        assert find_delta_section("## ADDED Requirements\n", "REMOVED") is None

    def test_section_body_stops_at_next_section(self):
        section = find_delta_section(FULL_DELTA, "ADDED")
        assert section is not None
        assert "Two Factor" in section.text
        assert "MODIFIED" not in section.text
        assert "Login" not in section.text

    def test_first_line_number(self):
        section = find_delta_section(FULL_DELTA, "ADDED")
        assert section.first_line == 4

    def test_last_section_runs_to_end(self):
        section = find_delta_section(FULL_DELTA, "RENAMED")
        assert section.text.endswith("- TO: `### Requirement: Sign Out`\n")

    def test_first_occurrence_wins(self):
        text = (
            "## ADDED Requirements\n### Requirement: A\nx\n"
            "## ADDED Requirements\n### Requirement: B\ny\n"
        )
        section = find_delta_section(text, "ADDED")
        assert "Requirement: A" in section.text
        assert "Requirement: B" not in section.text


class TestParseDeltaText:
    """Tests for parse_delta_text."""

    def test_full_delta(self):
        plan = parse_delta_text(FULL_DELTA)
        assert [r.name for r in plan.added] == ["Two Factor"]
        assert [r.name for r in plan.modified] == ["Login"]
        assert plan.removed == ("Remember Me",)
        assert [(op.from_name, op.to_name) for op in plan.renamed] == [("Logout", "Sign Out")]
        assert plan.has_deltas()
        assert plan.count_operations() == 4

    def test_added_block_content(self):
        plan = parse_delta_text(FULL_DELTA)
        assert plan.added[0].raw_content == (
            "### Requirement: Two Factor\n"
            "The system SHALL require a second factor.\n"
            "\n"
            "#### Scenario: OTP\n"
            "- **WHEN** a code is entered\n"
            "- **THEN** it is verified\n"
            "\n"
        )

    def test_sections_in_any_order(self):
        text = (
            "## REMOVED Requirements\n### Requirement: Old\n\n"
            "## ADDED Requirements\n### Requirement: New\nbody\n"
        )
        plan = parse_delta_text(text)
        assert plan.removed == ("Old",)
        assert [r.name for r in plan.added] == ["New"]

    def test_no_sections(self):
        plan = parse_delta_text("# Just a title\n\nSome text.\n")
        assert not plan.has_deltas()
        assert plan.count_operations() == 0

    def test_empty_sections(self):
        plan = parse_delta_text("## ADDED Requirements\n\n## REMOVED Requirements\n")
        assert not plan.has_deltas()

    def test_subsection_ends_block_in_delta(self):
        text = "## ADDED Requirements\n### Requirement: A\nbody\n### Notes\nnot part of A\n"
        plan = parse_delta_text(text)
        assert "not part of A" not in plan.added[0].raw_content


class TestParseRemovedSection:
    """Tests for parse_removed_section."""

    def test_notes_ignored(self):
        assert parse_removed_section(FULL_DELTA) == ["Remember Me"]

    def test_indented_headings(self):
        text = "## REMOVED Requirements\n  ### Requirement: A\n### Requirement: B\n"
        assert parse_removed_section(text) == ["A", "B"]


class TestParseRenamedSection:
    """Tests for parse_renamed_section."""

    def test_multiple_pairs(self):
        text = (
            "## RENAMED Requirements\n"
            "- FROM: `### Requirement: A`\n"
            "- TO: `### Requirement: B`\n"
            "\n"
            "- FROM: `### Requirement: C`\n"
            "- TO: `### Requirement: D`\n"
        )
        ops = parse_renamed_section(text)
        assert [(op.from_name, op.to_name) for op in ops] == [("A", "B"), ("C", "D")]

    def test_dangling_to_dropped(self):
        text = (
            "## RENAMED Requirements\n"
            "- TO: `### Requirement: Orphan`\n"
            "- FROM: `### Requirement: A`\n"
            "- TO: `### Requirement: B`\n"
        )
        ops = parse_renamed_section(text)
        assert [(op.from_name, op.to_name) for op in ops] == [("A", "B")]

    def test_later_from_overwrites_pending(self):
        text = (
            "## RENAMED Requirements\n"
            "- FROM: `### Requirement: A`\n"
            "- FROM: `### Requirement: B`\n"
            "- TO: `### Requirement: C`\n"
        )
        ops = parse_renamed_section(text)
        assert [(op.from_name, op.to_name) for op in ops] == [("B", "C")]

    def test_strict_dangling_to(self):
        text = "## RENAMED Requirements\n\n- TO: `### Requirement: Orphan`\n"
        with pytest.raises(DeltaParseError) as exc_info:
            parse_renamed_section(text, strict=True)
        assert exc_info.value.line_number == 3
        assert "Orphan" in str(exc_info.value)

    def test_strict_unfinished_from(self):
        text = "## RENAMED Requirements\n- FROM: `### Requirement: A`\n"
        with pytest.raises(DeltaParseError) as exc_info:
            parse_renamed_section(text, strict=True)
        assert exc_info.value.line_number == 2

    def test_strict_overwritten_from(self):
        text = (
            "## RENAMED Requirements\n"
            "- FROM: `### Requirement: A`\n"
            "- FROM: `### Requirement: B`\n"
            "- TO: `### Requirement: C`\n"
        )
        with pytest.raises(DeltaParseError, match="'A'"):
            parse_renamed_section(text, strict=True)

    def test_strict_accepts_well_formed(self):
        ops = parse_renamed_section(FULL_DELTA, strict=True)
        assert len(ops) == 1


class TestParseDeltaFile:
    """Tests for parse_delta_file."""

    def test_reads_file(self, tmp_path: Path):
        delta = tmp_path / "spec.md"
        delta.write_text(FULL_DELTA, encoding="utf-8")
        plan = parse_delta_file(delta)
        assert plan.count_operations() == 4

    def test_strict_flag_passed_through(self, tmp_path: Path):
        delta = tmp_path / "spec.md"
        delta.write_text("## RENAMED Requirements\n- TO: `### Requirement: X`\n", encoding="utf-8")
        assert not parse_delta_file(delta).has_deltas()
        with pytest.raises(DeltaParseError):
            parse_delta_file(delta, strict_renames=True)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(OSError):
            parse_delta_file(tmp_path / "nope.md")
