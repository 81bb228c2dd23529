"""Report assembly: request contracts, append-only buffers, the per-request store and PDF output."""

from labreport.report.buffer import FileReportBuffer, ReportBuffer
from labreport.report.contracts import GenerationRequest, GenerationResult, parse_generation_request
from labreport.report.pdf import render_pdf
from labreport.report.store import ReportStore

__all__ = [
    "FileReportBuffer",
    "GenerationRequest",
    "GenerationResult",
    "ReportBuffer",
    "ReportStore",
    "parse_generation_request",
    "render_pdf",
]
