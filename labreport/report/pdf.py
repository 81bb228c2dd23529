"""Markdown -> PDF rendering with reportlab.

Covers the markdown the writer is instructed to produce: ATX headings,
paragraphs, bullet and numbered lists, horizontal rules, fenced code,
pipe tables and inline bold/italic/code. A leading `---` is a rule, never
front matter.
"""

from __future__ import annotations

import logging
import re
import threading
from html.parser import HTMLParser
from io import BytesIO
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape, quoteattr

import markdown
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, StyleSheet1, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    Preformatted,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from labreport.errors import RenderError

logger = logging.getLogger(__name__)

PAGE_MARGINS_MM = {"top": 15, "bottom": 20, "left": 20, "right": 20}
DEFAULT_TITLE = "Experiment Report"

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_RULE_RE = re.compile(r"^\s*([-*_])(\s*\1){2,}\s*$")
_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+(.*)$")
_ORDERED_RE = re.compile(r"^(\s*)(\d+)[.)]\s+(.*)$")
_TABLE_SEP_RE = re.compile(r"^\s*\|?\s*:?-{2,}:?\s*(\|\s*:?-{2,}:?\s*)*\|?\s*$")


def _styles() -> StyleSheet1:
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="ReportH1", parent=styles["Heading1"], spaceAfter=10))
    styles.add(ParagraphStyle(name="ReportH2", parent=styles["Heading2"], spaceBefore=10, spaceAfter=8))
    styles.add(ParagraphStyle(name="ReportH3", parent=styles["Heading3"], spaceBefore=8, spaceAfter=6))
    styles.add(ParagraphStyle(name="ReportH4", parent=styles["Heading4"], spaceBefore=6, spaceAfter=4))
    styles.add(ParagraphStyle(name="ReportBody", parent=styles["BodyText"], leading=14, spaceAfter=6))
    styles.add(ParagraphStyle(name="ReportListItem", parent=styles["BodyText"], leading=14, spaceAfter=2))
    styles.add(
        ParagraphStyle(
            name="ReportCode",
            parent=styles["Code"],
            fontName="Courier",
            fontSize=8,
            leading=10,
            backColor=colors.whitesmoke,
        )
    )
    return styles


# Python-Markdown tag -> reportlab paragraph tag.
_INLINE_TAGS = {"strong": "b", "b": "b", "em": "i", "i": "i", "code": "font", "a": "a"}
_BLOCK_START_RE = re.compile(r"^(?:\d+(?=\.\s)|(?=[#>+*-](?:\s|$)))")

_local = threading.local()


def _inline_markdown() -> markdown.Markdown:
    """Per-thread Markdown instance with raw HTML disabled."""
    md = getattr(_local, "md", None)
    if md is None:
        md = markdown.Markdown()
        md.preprocessors.deregister("html_block", strict=False)
        md.inlinePatterns.deregister("html", strict=False)
        _local.md = md
    md.reset()
    return md


class _ReportlabMarkup(HTMLParser):
    """Translates Python-Markdown's inline HTML into reportlab paragraph markup.

    Unsupported tags are dropped (their text is kept). Tags are closed in
    nesting order, and anything still open at the end is closed.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self.open_tags: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        name = _INLINE_TAGS.get(tag)
        if name is None:
            return
        if name == "font":
            self.parts.append('<font face="Courier">')
        elif name == "a":
            href = dict(attrs).get("href")
            if not href:
                return
            self.parts.append(f'<a href={quoteattr(href)} color="blue">')
        else:
            self.parts.append(f"<{name}>")
        self.open_tags.append(name)

    def handle_endtag(self, tag: str) -> None:
        name = _INLINE_TAGS.get(tag)
        if name is None or name not in self.open_tags:
            return
        while self.open_tags:
            closing = self.open_tags.pop()
            self.parts.append(f"</{closing}>")
            if closing == name:
                break

    def handle_data(self, data: str) -> None:
        self.parts.append(escape(data))

    def close(self) -> None:
        super().close()
        while self.open_tags:
            self.parts.append(f"</{self.open_tags.pop()}>")


def format_inline(text: str) -> str:
    """Escape `text` for reportlab's paragraph markup and apply inline emphasis.

    Raw HTML in `text` is shown literally. A leading list or heading marker
    stays text, since block structure is handled by `markdown_to_flowables`.
    """
    source = _BLOCK_START_RE.sub(lambda m: m.group(0) + "\\", text.strip(), count=1)
    parser = _ReportlabMarkup()
    parser.feed(_inline_markdown().convert(source))
    parser.close()
    return "".join(parser.parts).strip()


def _table(rows: list[str], styles: StyleSheet1) -> Any:
    cells = [
        [Paragraph(format_inline(c.strip()), styles["ReportListItem"]) for c in row.strip().strip("|").split("|")]
        for row in rows
        if not _TABLE_SEP_RE.match(row)
    ]
    if not cells:
        return Spacer(1, 0)
    width = max(len(r) for r in cells)
    cells = [r + [Paragraph("", styles["ReportListItem"])] * (width - len(r)) for r in cells]
    table = Table(cells, hAlign="LEFT", repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    return table


def markdown_to_flowables(markdown: str, styles: StyleSheet1 | None = None) -> list[Any]:
    """Convert report markdown into reportlab flowables."""
    styles = styles or _styles()
    story: list[Any] = []
    paragraph: list[str] = []
    lines = markdown.splitlines()

    def flush_paragraph() -> None:
        if paragraph:
            story.append(Paragraph(format_inline(" ".join(paragraph)), styles["ReportBody"]))
            paragraph.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        if stripped.startswith("```"):
            flush_paragraph()
            code: list[str] = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith("```"):
                code.append(lines[i])
                i += 1
            story.append(Preformatted("\n".join(code), styles["ReportCode"]))
            i += 1
            continue

        if not stripped:
            flush_paragraph()
            i += 1
            continue

        heading = _HEADING_RE.match(stripped)
        if heading:
            flush_paragraph()
            level = min(len(heading.group(1)), 4)
            story.append(Paragraph(format_inline(heading.group(2)), styles[f"ReportH{level}"]))
            i += 1
            continue

        if _RULE_RE.match(stripped):
            flush_paragraph()
            story.append(HRFlowable(width="100%", thickness=0.5, color=colors.grey, spaceBefore=4, spaceAfter=6))
            i += 1
            continue

        if stripped.startswith("|"):
            flush_paragraph()
            rows: list[str] = []
            while i < len(lines) and lines[i].strip().startswith("|"):
                rows.append(lines[i])
                i += 1
            story.append(_table(rows, styles))
            story.append(Spacer(1, 6))
            continue

        bullet = _BULLET_RE.match(line)
        ordered = _ORDERED_RE.match(line)
        if bullet or ordered:
            flush_paragraph()
            if ordered:
                indent, marker, text = ordered.group(1), f"{ordered.group(2)}.", ordered.group(3)
            else:
                indent, marker, text = bullet.group(1), "•", bullet.group(2)
            depth = len(indent.expandtabs(4)) // 2
            style = ParagraphStyle(
                name=f"ReportListItem{depth}",
                parent=styles["ReportListItem"],
                leftIndent=12 + 12 * depth,
                bulletIndent=12 * depth,
            )
            story.append(Paragraph(format_inline(text), style, bulletText=marker))
            i += 1
            continue

        paragraph.append(stripped)
        i += 1

    flush_paragraph()
    return story


def render_pdf(markdown: str, dest: Path | str | None = None, title: str = DEFAULT_TITLE) -> bytes:
    """Render report markdown to an A4 PDF.

    Args:
        markdown: Report content.
        dest: Optional path the PDF is also written to.
        title: Document title metadata.

    Returns:
        The PDF bytes.

    Raises:
        RenderError: The markdown is empty, or reportlab failed.
    """
    if not markdown or not markdown.strip():
        raise RenderError("Report is empty. Generate a report before exporting to PDF.")

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        topMargin=PAGE_MARGINS_MM["top"] * mm,
        bottomMargin=PAGE_MARGINS_MM["bottom"] * mm,
        leftMargin=PAGE_MARGINS_MM["left"] * mm,
        rightMargin=PAGE_MARGINS_MM["right"] * mm,
        title=title,
    )
    try:
        doc.build(markdown_to_flowables(markdown))
    except Exception as e:
        raise RenderError(f"PDF rendering failed: {e}") from e

    data = buf.getvalue()
    if not data:
        raise RenderError("PDF rendering produced no output.")

    if dest is not None:
        dest_path = Path(dest)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(data)
        logger.info("PDF saved to %s", dest_path)
    return data
