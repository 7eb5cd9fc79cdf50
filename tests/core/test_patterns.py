"""Tests for deltaspec.core.patterns - line classification and name keys."""

import pytest

from deltaspec.core.patterns import (
    LineKind,
    classify_line,
    detect_newline,
    is_delta_section_header,
    is_requirements_section_header,
    normalize_requirement_name,
    requirement_name,
    split_lines,
)


class TestClassifyLine:
    """Tests for classify_line."""

    @pytest.mark.parametrize(
        "line, kind",
        [
            ("### Requirement: Login", LineKind.REQUIREMENT),
            ("###   Requirement:Login", LineKind.REQUIREMENT),
            ("## Requirements", LineKind.SECTION),
            ("## ADDED Requirements", LineKind.SECTION),
            ("### Notes", LineKind.SUBSECTION),
            ("#### Scenario: Valid login", LineKind.SCENARIO),
            ("  #### Scenario: Indented", LineKind.SCENARIO),
            ("The system SHALL log users in.", LineKind.TEXT),
            ("", LineKind.TEXT),
            ("# Title", LineKind.TEXT),
        ],
    )
    def test_classification(self, line, kind):
        assert classify_line(line) is kind

    def test_requirement_wins_over_subsection(self):
        """A requirement heading is never reported as a plain level-3 heading."""
        assert classify_line("### Requirement: X") is LineKind.REQUIREMENT
        assert classify_line("### Requirements overview") is LineKind.SUBSECTION

    def test_heading_needs_whitespace(self):
        assert classify_line("##Requirements") is LineKind.TEXT


class TestRequirementName:
    """Tests for requirement_name."""

    def test_name_is_trimmed(self):
        assert requirement_name("### Requirement:   Login Flow  ") == "Login Flow"

    def test_case_preserved(self):
        assert requirement_name("### Requirement: OAuth Login") == "OAuth Login"

    def test_not_a_heading(self):
        assert requirement_name("## Requirements") is None
        assert requirement_name("Requirement: Login") is None


class TestSectionHeaders:
    """Tests for delta and requirements section detection."""

    def test_delta_header_flexible_whitespace(self):
        assert is_delta_section_header("##   ADDED    Requirements  ", "ADDED")

    def test_delta_header_keyword_is_exact(self):
        assert not is_delta_section_header("## Added Requirements", "ADDED")
        assert not is_delta_section_header("## ADDED Requirements", "MODIFIED")

    def test_delta_header_rejects_suffix(self):
        assert not is_delta_section_header("## ADDED Requirements (draft)", "ADDED")

    def test_requirements_header(self):
        assert is_requirements_section_header("## Requirements")
        assert is_requirements_section_header("  ## Requirements  ")
        assert not is_requirements_section_header("## Requirements Overview")
        assert not is_requirements_section_header("## ADDED Requirements")


class TestNormalizeRequirementName:
    """Tests for normalize_requirement_name."""

    def test_trim_and_lowercase(self):
        assert normalize_requirement_name("  User Login ") == "user login"

    def test_inner_whitespace_kept(self):
        assert normalize_requirement_name("User  Login") == "user  login"

    def test_equivalent_names(self):
        assert normalize_requirement_name("LOGIN") == normalize_requirement_name(" login")


class TestSplitLines:
    """Tests for split_lines."""

    def test_empty(self):
        assert list(split_lines("")) == []

    def test_trailing_newline(self):
        assert list(split_lines("a\nb\n")) == [("a", "\n"), ("b", "\n")]

    def test_no_trailing_newline(self):
        assert list(split_lines("a\nb")) == [("a", "\n"), ("b", "")]

    def test_crlf_kept_in_terminator(self):
        assert list(split_lines("a\r\nb\r\n")) == [("a", "\r\n"), ("b", "\r\n")]

    def test_blank_lines(self):
        assert list(split_lines("a\n\nb\n")) == [("a", "\n"), ("", "\n"), ("b", "\n")]

    def test_round_trip(self):
        text = "# T\r\n\r\n## Requirements\nx\n\nlast"
        assert "".join(line + term for line, term in split_lines(text)) == text


class TestDetectNewline:
    """Tests for detect_newline."""

    def test_lf(self):
        assert detect_newline("a\nb\n") == "\n"

    def test_crlf(self):
        assert detect_newline("a\r\nb\r\n") == "\r\n"

    def test_mixed_uses_majority(self):
        assert detect_newline("a\r\nb\r\nc\n") == "\r\n"
        assert detect_newline("a\r\nb\nc\n") == "\n"

    def test_no_line_breaks(self):
        assert detect_newline("") == "\n"
