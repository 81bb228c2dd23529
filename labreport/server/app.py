"""FastAPI facade: web form, report generation, live preview stream and PDF export."""

from __future__ import annotations

import asyncio
import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, AsyncIterator

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, Response, StreamingResponse

from labreport.agents.report_pipeline import ReportGenerator
from labreport.config import LabReportSettings
from labreport.errors import GenerationCancelled, LabReportError, RenderError, ValidationError
from labreport.factory import DefaultLLMFactory
from labreport.report.buffer import ReportBuffer
from labreport.report.contracts import parse_generation_request
from labreport.report.pdf import render_pdf
from labreport.report.store import ReportStore

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"
PDF_FILENAME = "experiment_report.pdf"
# How often a running generation checks whether its client is still connected.
DISCONNECT_POLL_SECONDS = 0.5
_REPORT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _sse(data: dict[str, Any], event: str | None = None) -> str:
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {json.dumps(data)}\n\n"


async def _json_body(request: Request) -> Any:
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        raise ValidationError("Request body must be valid JSON") from None


def create_app(
    settings: LabReportSettings | None = None,
    generator: ReportGenerator | None = None,
    store: ReportStore | None = None,
) -> FastAPI:
    """Create the HTTP app.

    Args:
        settings: Defaults to `LabReportSettings.from_env()`.
        generator: Report generator; built from `settings` on first use when omitted.
        store: Per-request report buffers; built from `settings` when omitted.
    """
    settings = settings or LabReportSettings.from_env()
    store = store or ReportStore(
        storage=settings.storage,
        reports_dir=settings.reports_dir,
        max_reports=settings.max_reports,
    )

    app = FastAPI(
        title="Lab Report Generator API",
        description="Generates experiment reports with an orchestrator/writer agent pair.",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.generator = generator
    generator_lock = threading.Lock()

    def get_generator() -> ReportGenerator:
        with generator_lock:
            if app.state.generator is None:
                app.state.generator = ReportGenerator(settings=settings, llm_factory=DefaultLLMFactory(settings))
            return app.state.generator

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.get("/")
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    @app.post("/api/generate")
    async def generate(request: Request) -> JSONResponse:
        """Generate a report; runs the pipeline in a worker thread tied to this connection."""
        try:
            payload = await _json_body(request)
            generation_request = parse_generation_request(payload)
            report_id = payload.get("report_id") or None
            if report_id is not None and not (isinstance(report_id, str) and _REPORT_ID_RE.match(report_id)):
                raise ValidationError("report_id must be 1-64 letters, digits, dashes or underscores")
            try:
                report = store.create(report_id)
            except ValueError as e:
                raise ValidationError(str(e)) from e
        except ValidationError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})

        logger.info(
            "Received request: subject=%r experiments=%s headings=%s",
            generation_request.subject,
            generation_request.experiments,
            generation_request.headings,
        )

        cancel_event = threading.Event()
        try:
            report_generator = get_generator()
            task = asyncio.ensure_future(
                asyncio.to_thread(report_generator.generate, generation_request, report, cancel_event)
            )
            while not task.done():
                await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
                if not task.done() and not cancel_event.is_set() and await request.is_disconnected():
                    logger.info("Client disconnected; cancelling report %s", report.report_id)
                    cancel_event.set()
            result = task.result()
        except GenerationCancelled as e:
            logger.info("Report %s cancelled: %s", report.report_id, e)
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
        except (LabReportError, ValueError) as e:
            logger.error("Error generating report %s: %s", report.report_id, e)
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
        except Exception as e:
            logger.exception("Unexpected error generating report %s", report.report_id)
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
        finally:
            report.close()

        return JSONResponse(
            content={
                "success": True,
                "markdown": result.markdown,
                "message": "Report generated successfully",
                "report_id": result.report_id,
            }
        )

    @app.get("/api/markdown")
    async def markdown(report_id: str | None = Query(default=None)) -> dict[str, Any]:
        """Current content of a report (the latest when no id is given); empty when none exists."""
        buffer = store.resolve(report_id)
        if buffer is None:
            return {"success": True, "markdown": ""}
        try:
            content = buffer.read()
        except OSError:
            content = ""
        return {"success": True, "markdown": content, "report_id": buffer.report_id}

    @app.get("/api/stream")
    async def stream(request: Request, report_id: str | None = Query(default=None)) -> StreamingResponse:
        """Server-sent events with the report content each time it changes.

        With a `report_id` the stream waits for that report, then ends with a
        `done` event once it is complete. Without one it follows the latest report.
        """
        interval = settings.stream_interval

        async def events() -> AsyncIterator[str]:
            current: ReportBuffer | None = None
            last_sent: str | None = None
            while not await request.is_disconnected():
                buffer = store.resolve(report_id)
                if buffer is None:
                    await asyncio.sleep(interval)
                    continue
                if buffer is not current:
                    current, last_sent = buffer, None

                version, content, closed = buffer.snapshot()
                if content != last_sent:
                    last_sent = content
                    yield _sse({"markdown": content})
                if closed and report_id:
                    yield _sse({"report_id": buffer.report_id}, event="done")
                    return
                await asyncio.to_thread(buffer.wait_for_change, version, interval)

        return StreamingResponse(
            events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
        )

    @app.post("/api/export-pdf")
    async def export_pdf(request: Request) -> Response:
        """Render a report (the latest when no id is given) to PDF."""
        try:
            payload = await _json_body(request)
        except ValidationError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        report_id = payload.get("report_id") if isinstance(payload, dict) else None

        buffer = store.resolve(report_id)
        try:
            if buffer is None:
                raise RenderError("No report to export. Generate a report first.")
            dest = store.pdf_path(buffer.report_id) if settings.storage == "file" else None
            pdf = await asyncio.to_thread(render_pdf, buffer.read(), dest)
        except RenderError as e:
            logger.error("Error exporting PDF: %s", e)
            return JSONResponse(status_code=500, content={"error": str(e)})

        return Response(
            content=pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'},
        )

    return app
