"""Tests for the labreport command line."""

from unittest.mock import patch

from labreport.main import main
from labreport.report import GenerationResult


def _fake_generate(request, report, cancel_event=None):
    report.append(f"## Experiment No. 1: {request.experiments[0]}")
    report.close()
    return GenerationResult(report_id=report.report_id, markdown=report.read(), experiments_written=1)


def test_generate_writes_markdown_and_pdf(tmp_path, monkeypatch):
    monkeypatch.setenv("LABREPORT_STORAGE", "memory")
    output = tmp_path / "report.md"
    pdf = tmp_path / "report.pdf"

    with patch("labreport.agents.ReportGenerator") as generator_cls:
        generator_cls.return_value.generate.side_effect = _fake_generate
        code = main(
            [
                "generate",
                "--subject", "Physics",
                "--experiment", "Ohm's Law",
                "--heading", "Aim",
                "--output", str(output),
                "--pdf", str(pdf),
            ]
        )

    assert code == 0
    assert output.read_text(encoding="utf-8") == "## Experiment No. 1: Ohm's Law\n\n"
    assert pdf.read_bytes().startswith(b"%PDF")


def test_invalid_request_exits_with_error(monkeypatch):
    monkeypatch.setenv("LABREPORT_STORAGE", "memory")
    with patch("labreport.agents.ReportGenerator") as generator_cls:
        code = main(["generate", "--subject", " ", "--experiment", "A", "--heading", "Aim"])

    assert code == 1
    generator_cls.assert_not_called()
