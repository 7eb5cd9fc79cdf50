"""
deltaspec.core.patterns - Heading patterns and line classification.

Spec documents have no formal grammar. Structure is inferred from a few
heading conventions, so every parser in the package goes through the
line classifier defined here instead of matching regexes ad hoc.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from enum import Enum

REQUIREMENT_HEADER_PATTERN = re.compile(r"^###\s+Requirement:\s*(?P<name>.+)$")
SECTION_HEADER_PATTERN = re.compile(r"^##\s+")
SUBSECTION_HEADER_PATTERN = re.compile(r"^###\s+")
SCENARIO_HEADER_PATTERN = re.compile(r"^####\s+Scenario:\s*(?P<name>.+)$")
REQUIREMENTS_SECTION_PATTERN = re.compile(r"^##\s+Requirements$")

# Delta section keywords in document order.
DELTA_SECTIONS = ("ADDED", "MODIFIED", "REMOVED", "RENAMED")

RENAME_FROM_PATTERN = re.compile(r"^-\s*FROM:\s*`###\s+Requirement:\s*(?P<name>.+?)`\s*$")
RENAME_TO_PATTERN = re.compile(r"^-\s*TO:\s*`###\s+Requirement:\s*(?P<name>.+?)`\s*$")

BLANK_LINE_RUN_RE = re.compile(r"(?:\r?\n){3,}")


class LineKind(Enum):
    """Structural role of a single line."""

    REQUIREMENT = "requirement"
    SECTION = "section"
    SUBSECTION = "subsection"
    SCENARIO = "scenario"
    TEXT = "text"


def classify_line(line: str) -> LineKind:
    """
    Classify a line (without its terminator) by heading kind.

    A ``### Requirement:`` heading wins over the generic ``###`` check, so
    SUBSECTION only ever means a level-3 heading that is not a requirement.
    """
    if REQUIREMENT_HEADER_PATTERN.match(line):
        return LineKind.REQUIREMENT
    if SECTION_HEADER_PATTERN.match(line):
        return LineKind.SECTION
    if SUBSECTION_HEADER_PATTERN.match(line):
        return LineKind.SUBSECTION
    if SCENARIO_HEADER_PATTERN.match(line.strip()):
        return LineKind.SCENARIO
    return LineKind.TEXT


def requirement_name(line: str) -> str | None:
    """Return the trimmed name of a requirement heading, or None."""
    match = REQUIREMENT_HEADER_PATTERN.match(line)
    if match is None:
        return None
    return match.group("name").strip()


def is_delta_section_header(line: str, keyword: str) -> bool:
    """Check for ``## <KEYWORD> Requirements`` with flexible whitespace."""
    pattern = rf"##\s+{re.escape(keyword)}\s+Requirements"
    return re.fullmatch(pattern, line.strip()) is not None


def is_requirements_section_header(line: str) -> bool:
    """Check for the base document's ``## Requirements`` heading."""
    return REQUIREMENTS_SECTION_PATTERN.match(line.strip()) is not None


def normalize_requirement_name(name: str) -> str:
    """
    Canonical identity of a requirement name.

    Two names refer to the same requirement iff they are equal after
    trimming surrounding whitespace and lower-casing. All lookups,
    duplicate checks and conflict checks use this key.
    """
    return name.strip().lower()


def split_lines(text: str) -> Iterator[tuple[str, str]]:
    """
    Split text into ``(content, terminator)`` pairs.

    Only ``\\n`` separates lines; a preceding ``\\r`` is moved into the
    terminator so that CRLF documents round-trip unchanged. The final
    line has an empty terminator when the text does not end in a newline,
    and no empty trailing pair is produced when it does.
    """
    if not text:
        return
    parts = text.split("\n")
    last = parts.pop()
    for part in parts:
        if part.endswith("\r"):
            yield part[:-1], "\r\n"
        else:
            yield part, "\n"
    if last:
        yield last, ""


def detect_newline(text: str) -> str:
    """Dominant line terminator of ``text``; LF unless CRLF lines outnumber LF ones."""
    crlf = text.count("\r\n")
    lf = text.count("\n") - crlf
    return "\r\n" if crlf > lf else "\n"
