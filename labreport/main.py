"""Command-line entry point for the lab report generator.

Configure the model credentials (GROQ_API_KEY by default) in a .env file.

Usage:
    labreport generate --subject "Software Engineering" \
        --experiment "Online Railway Ticket Reservation" \
        --experiment "Online Library Management System" \
        --heading Aim --heading Theory --output report.md --pdf report.pdf
    labreport serve --port 3000
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from labreport.config import LabReportSettings
from labreport.errors import LabReportError
from labreport.integrations import is_observability_enabled

logger = logging.getLogger("labreport")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="labreport", description="Generate experiment reports with LLM agents")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate one report")
    gen.add_argument("--subject", required=True, help="Subject name")
    gen.add_argument("--experiment", action="append", required=True, help="Experiment topic (repeat, in order)")
    gen.add_argument("--heading", action="append", required=True, help="Heading for every experiment (repeat, in order)")
    gen.add_argument("--output", type=Path, help="Write the markdown here (default: stdout)")
    gen.add_argument("--pdf", type=Path, help="Also render the report to this PDF file")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)
    return parser


def _generate(args: argparse.Namespace, settings: LabReportSettings) -> int:
    from labreport.agents import ReportGenerator
    from labreport.factory import DefaultLLMFactory
    from labreport.report import ReportStore, parse_generation_request, render_pdf

    request = parse_generation_request(
        {"subject": args.subject, "experiments": args.experiment, "headings": args.heading}
    )
    store = ReportStore(storage=settings.storage, reports_dir=settings.reports_dir)
    report = store.create(uuid.uuid4().hex)

    generator = ReportGenerator(settings=settings, llm_factory=DefaultLLMFactory(settings))
    result = generator.generate(request, report)

    if args.output:
        args.output.write_text(result.markdown, encoding="utf-8")
        logger.info("Markdown saved to %s", args.output)
    else:
        sys.stdout.write(result.markdown)

    if args.pdf:
        render_pdf(result.markdown, dest=args.pdf)
    return 0


def _serve(args: argparse.Namespace, settings: LabReportSettings) -> int:
    import uvicorn

    from labreport.server import create_app

    logger.info("Server running at http://%s:%d", args.host, args.port)
    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the labreport CLI."""
    load_dotenv()
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Langfuse tracing: %s", "enabled" if is_observability_enabled() else "disabled")

    try:
        settings = LabReportSettings.from_env()
        if args.command == "generate":
            return _generate(args, settings)
        return _serve(args, settings)
    except (LabReportError, ValueError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
