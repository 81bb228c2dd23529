"""Report orchestrator: the manager agent delegating experiments one at a time."""

from __future__ import annotations

import logging
import threading

from langchain_core.language_models import BaseChatModel

from labreport.agents.experiment_writer import ExperimentWriter
from labreport.agents.runtime import AgentDefinition, AgentRunner
from labreport.config import RetryPolicy
from labreport.errors import ReportIncompleteError
from labreport.factory import DefaultLLMFactory
from labreport.report.buffer import ReportBuffer
from labreport.report.contracts import GenerationRequest
from labreport.tools import ToolRegistry

from .prompts import ORCHESTRATOR_INSTRUCTIONS
from .schedule import ExperimentSchedule
from .tools import create_write_experiment_tool

logger = logging.getLogger(__name__)

ORCHESTRATOR_NAME = "report-orchestrator"


class ReportOrchestrator:
    """Manager agent whose only tool delegates one experiment to the writer."""

    def __init__(
        self,
        writer: ExperimentWriter,
        llm_factory: DefaultLLMFactory | None = None,
        llm: BaseChatModel | None = None,
        max_steps: int = 50,
        retry_policy: RetryPolicy | None = None,
    ):
        if llm_factory:
            self.llm = llm_factory.get_llm(name=ORCHESTRATOR_NAME)
        else:
            self.llm = llm

        if not self.llm:
            raise ValueError("Either llm_factory or llm must be provided")

        self.writer = writer
        self.max_steps = max_steps
        self.retry_policy = retry_policy or RetryPolicy()

    def run(
        self,
        request: GenerationRequest,
        report: ReportBuffer,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """Write every experiment of `request` into `report`, in order.

        Returns:
            The orchestrator's final summary.

        Raises:
            StepLimitExceeded: The orchestrator ran out of steps.
            ReportIncompleteError: It stopped before every experiment was written.
            RemoteServiceError: The chat API kept failing.
            GenerationCancelled: `cancel_event` was set.
        """
        schedule = ExperimentSchedule(request)
        definition = AgentDefinition(
            name=ORCHESTRATOR_NAME,
            instructions=ORCHESTRATOR_INSTRUCTIONS,
            registry=ToolRegistry(
                [create_write_experiment_tool(self.writer, schedule, report, cancel_event=cancel_event)]
            ),
            max_steps=self.max_steps,
        )
        runner = AgentRunner(llm=self.llm, definition=definition, retry_policy=self.retry_policy)

        summary = runner.run(request.render_prompt(), cancel_event=cancel_event)

        if not schedule.is_complete():
            raise ReportIncompleteError(written=schedule.completed, expected=schedule.total)
        logger.info("All %d experiments written", schedule.total)
        return summary
