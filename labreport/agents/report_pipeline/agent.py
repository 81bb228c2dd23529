"""End-to-end report generation: request -> orchestrator -> writers -> report buffer."""

from __future__ import annotations

import logging
import threading

from langchain_core.language_models import BaseChatModel

from labreport.agents.experiment_writer import ExperimentWriter
from labreport.agents.report_orchestrator import ReportOrchestrator
from labreport.config import LabReportSettings
from labreport.factory import DefaultLLMFactory
from labreport.report.buffer import ReportBuffer
from labreport.report.contracts import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Runs one generation request against its own report buffer.

    Architecture (strictly sequential):
    ReportOrchestrator -> write_experiment (x N) -> ExperimentWriter -> ReportBuffer
    """

    def __init__(
        self,
        settings: LabReportSettings | None = None,
        llm_factory: DefaultLLMFactory | None = None,
        orchestrator_llm: BaseChatModel | None = None,
        writer_llm: BaseChatModel | None = None,
    ):
        """Initialize the generator.

        Args:
            settings: Step ceilings, retry policy and paragraph limit.
            llm_factory: Factory for creating LLMs.
            orchestrator_llm: Model for the orchestrator (if factory not used).
            writer_llm: Model for the writer; defaults to `orchestrator_llm`.
        """
        self.settings = settings or (llm_factory.settings if llm_factory else LabReportSettings())
        self.writer = ExperimentWriter(
            llm_factory=llm_factory,
            llm=writer_llm or orchestrator_llm,
            max_steps=self.settings.writer_max_steps,
            max_attempts=self.settings.writer_max_attempts,
            paragraph_line_limit=self.settings.paragraph_line_limit,
            retry_policy=self.settings.retry,
        )
        self.orchestrator = ReportOrchestrator(
            writer=self.writer,
            llm_factory=llm_factory,
            llm=orchestrator_llm,
            max_steps=self.settings.orchestrator_max_steps,
            retry_policy=self.settings.retry,
        )

    def generate(
        self,
        request: GenerationRequest,
        report: ReportBuffer | None = None,
        cancel_event: threading.Event | None = None,
    ) -> GenerationResult:
        """Generate the report for `request`.

        The buffer is closed when the run ends, whether it succeeded or not.
        """
        report = report if report is not None else ReportBuffer()
        logger.info(
            "Starting report %s: %s (%d experiments)",
            report.report_id or "<anonymous>",
            request.subject,
            len(request.experiments),
        )
        try:
            summary = self.orchestrator.run(request, report, cancel_event=cancel_event)
        finally:
            report.close()

        markdown = report.read()
        logger.info("Report %s complete (%d characters)", report.report_id or "<anonymous>", len(markdown))
        return GenerationResult(
            report_id=report.report_id,
            markdown=markdown,
            summary=summary,
            experiments_written=len(request.experiments),
        )
