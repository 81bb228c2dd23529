"""Tests for markdown -> PDF rendering."""

import pytest
from reportlab.platypus import HRFlowable, Paragraph, Preformatted, Table

from fakes import compliant_section
from labreport.errors import RenderError
from labreport.report.pdf import format_inline, markdown_to_flowables, render_pdf


def test_render_returns_pdf_bytes():
    markdown = compliant_section(1, "Ohm's Law", ["Aim", "Theory"])
    assert render_pdf(markdown).startswith(b"%PDF")


def test_render_writes_destination(tmp_path):
    dest = tmp_path / "out" / "report.pdf"
    data = render_pdf("## Experiment No. 1: A\n\nText.", dest=dest)
    assert dest.read_bytes() == data


@pytest.mark.parametrize("markdown", ["", "   \n\n"])
def test_empty_report_cannot_be_rendered(markdown):
    with pytest.raises(RenderError):
        render_pdf(markdown)


def test_leading_rule_renders_as_rule_not_front_matter():
    story = markdown_to_flowables("---\n\n## Experiment No. 1: A\n\nBody")
    assert isinstance(story[0], HRFlowable)
    assert isinstance(story[1], Paragraph)
    assert story[1].style.name == "ReportH2"


def test_block_elements_are_converted():
    markdown = "\n".join(
        [
            "### Procedure",
            "1. First step",
            "2. Second step",
            "- bullet",
            "",
            "```",
            "x = <1>",
            "```",
            "",
            "| Input | Output |",
            "| --- | --- |",
            "| 1 | 2 |",
        ]
    )
    story = markdown_to_flowables(markdown)
    kinds = [type(f) for f in story]
    assert kinds[:4] == [Paragraph, Paragraph, Paragraph, Paragraph]
    assert story[0].style.name == "ReportH3"
    assert story[1].bulletText == "1."
    assert story[3].bulletText == "•"
    assert Preformatted in kinds
    assert Table in kinds


def test_format_inline_escapes_and_marks_up():
    assert format_inline("a < b & **c**") == "a &lt; b &amp; <b>c</b>"
    assert format_inline("*term* and `x<y`") == '<i>term</i> and <font face="Courier">x&lt;y</font>'
    assert format_inline("unmatched `tick") == "unmatched `tick"


@pytest.mark.parametrize(
    "text",
    [
        "This is ***very important*** text.",
        "**bold *and** italic*",
        "*open **nested* close**",
    ],
)
def test_overlapping_emphasis_renders(text):
    assert render_pdf(f"## Experiment No. 1: A\n\n{text}\n\n- {text}").startswith(b"%PDF")


def test_triple_emphasis_nests_tags():
    assert format_inline("***very important***") in {"<b><i>very important</i></b>", "<i><b>very important</b></i>"}


def test_raw_html_and_leading_markers_stay_literal():
    assert format_inline("use <input> tags") == "use &lt;input&gt; tags"
    assert format_inline("1. Introduction") == "1. Introduction"
    assert format_inline("- not a list") == "- not a list"
