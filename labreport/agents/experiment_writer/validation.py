"""Format checks for one experiment section.

Heading structure is checked strictly (a failing draft is sent back to the
writer). Paragraph length is only reported as a warning.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

# Approximate characters per rendered line on an A4 page with 20 mm margins.
RENDERED_LINE_WIDTH = 100

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_LIST_RE = re.compile(r"^\s*([-*+]|\d+[.)])\s+")
_RULE_RE = re.compile(r"^\s*([-*_])(\s*\1){2,}\s*$")
_FENCE_RE = re.compile(r"^```.*?^```[^\n]*$", re.MULTILINE | re.DOTALL)


@dataclass
class SectionCheck:
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def normalize_heading(text: str) -> str:
    text = re.sub(r"[*_`]", "", text)
    text = re.sub(r"\s+", " ", text).strip().rstrip(":").strip()
    return text.casefold()


def _headings(markdown: str) -> list[tuple[int, str]]:
    """(level, text) for every ATX heading outside fenced code."""
    found: list[tuple[int, str]] = []
    in_fence = False
    for line in markdown.splitlines():
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        m = _HEADING_RE.match(line)
        if m:
            found.append((len(m.group(1)), m.group(2)))
    return found


def _first_content_line(markdown: str) -> str:
    for line in markdown.splitlines():
        if line.strip() and not _RULE_RE.match(line):
            return line.strip()
    return ""


def _long_paragraphs(markdown: str, line_limit: int) -> list[str]:
    long_ones: list[str] = []
    prose = _FENCE_RE.sub("", markdown)
    for block in re.split(r"\n\s*\n", prose):
        stripped = block.strip()
        lines = [ln for ln in stripped.splitlines() if ln.strip()]
        if not lines or any(_HEADING_RE.match(ln) or _LIST_RE.match(ln) or ln.lstrip().startswith("|") for ln in lines):
            continue
        rendered = sum(max(1, math.ceil(len(ln) / RENDERED_LINE_WIDTH)) for ln in lines)
        if rendered > line_limit:
            long_ones.append(stripped[:60])
    return long_ones


def validate_section(
    markdown: str,
    number: int,
    topic: str,
    headings: list[str],
    line_limit: int = 4,
) -> SectionCheck:
    """Check one experiment section against the requested structure."""
    check = SectionCheck()
    if not markdown.strip():
        check.issues.append("No content was appended. Call append_to_file with the full section.")
        return check

    first = _first_content_line(markdown)
    m = _HEADING_RE.match(first)
    if not m or len(m.group(1)) != 2:
        check.issues.append(
            f"The section must start with a level-2 title: '## Experiment No. {number}: {topic}'."
        )
    else:
        title = normalize_heading(m.group(2))
        if not re.search(rf"(?<!\d){number}(?!\d)", title):
            check.issues.append(f"The level-2 title must contain the experiment number {number}.")
        if normalize_heading(topic) not in title:
            check.issues.append(f"The level-2 title must contain the topic '{topic}'.")

    found = _headings(markdown)
    if sum(1 for level, _ in found if level == 2) > 1:
        check.issues.append("Use exactly one level-2 heading (the experiment title).")

    actual = [normalize_heading(text) for level, text in found if level == 3]
    expected = [normalize_heading(h) for h in headings]
    if actual != expected:
        missing = [h for h in headings if normalize_heading(h) not in actual]
        extra = [text for level, text in found if level == 3 and normalize_heading(text) not in expected]
        if missing:
            check.issues.append(f"Missing ### headings: {', '.join(missing)}.")
        if extra:
            check.issues.append(f"Remove ### headings that were not requested: {', '.join(extra)}.")
        if not missing and not extra:
            check.issues.append(
                f"Use the ### headings exactly once each, in this order: {', '.join(headings)}."
            )

    for start in _long_paragraphs(markdown, line_limit):
        check.warnings.append(f"Paragraph longer than {line_limit} lines: '{start}...'")

    return check
