"""Experiment writer: one markdown section per call, checked before it is committed."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from langchain_core.language_models import BaseChatModel

from labreport.agents.runtime import AgentDefinition, AgentRunner
from labreport.config import RetryPolicy
from labreport.errors import LabReportError, StepLimitExceeded
from labreport.factory import DefaultLLMFactory
from labreport.report.buffer import ReportBuffer
from labreport.tools import ToolRegistry, create_append_tool

from .prompts import build_revision_prompt, build_writer_prompt, writer_instructions
from .validation import validate_section

logger = logging.getLogger(__name__)

WRITER_NAME = "experiment-writer"


class WriterError(LabReportError):
    """The writer produced no usable section."""


@dataclass
class WriterOutcome:
    """A finished experiment section."""

    number: int
    topic: str
    sections: list[str]
    attempts: int
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def markdown(self) -> str:
        return "\n\n".join(self.sections)


class ExperimentWriter:
    """Leaf agent whose only tool appends markdown to a private draft.

    Each attempt gets a fresh draft buffer. The draft is validated against the
    requested headings; a failing draft is retried with the issues fed back.
    The caller commits `WriterOutcome.sections` to the report in one step, so
    fragments of one experiment are never interleaved with another.
    """

    def __init__(
        self,
        llm_factory: DefaultLLMFactory | None = None,
        llm: BaseChatModel | None = None,
        max_steps: int = 10,
        max_attempts: int = 2,
        paragraph_line_limit: int = 4,
        retry_policy: RetryPolicy | None = None,
    ):
        """Initialize the writer.

        Args:
            llm_factory: Factory for creating LLMs.
            llm: Chat model to use when no factory is given.
            max_steps: Step ceiling of one writer run.
            max_attempts: Runs per experiment before giving up on the format check.
            paragraph_line_limit: Longest paragraph (in rendered lines) the prompt allows.
            retry_policy: Backoff for transient API failures.
        """
        if llm_factory:
            self.llm = llm_factory.get_llm(name=WRITER_NAME)
        else:
            self.llm = llm

        if not self.llm:
            raise ValueError("Either llm_factory or llm must be provided")

        self.max_steps = max_steps
        self.max_attempts = max(1, max_attempts)
        self.paragraph_line_limit = paragraph_line_limit
        self.retry_policy = retry_policy or RetryPolicy()

    def _runner(self, draft: ReportBuffer) -> AgentRunner:
        definition = AgentDefinition(
            name=WRITER_NAME,
            instructions=writer_instructions(self.paragraph_line_limit),
            registry=ToolRegistry([create_append_tool(draft)]),
            max_steps=self.max_steps,
        )
        return AgentRunner(llm=self.llm, definition=definition, retry_policy=self.retry_policy)

    def write(
        self,
        number: int,
        topic: str,
        headings: list[str],
        cancel_event: threading.Event | None = None,
    ) -> WriterOutcome:
        """Write the section for one experiment.

        Raises:
            WriterError: No attempt appended any content.
            StepLimitExceeded: No attempt appended content and one ran out of steps.
            RemoteServiceError: The chat API kept failing.
        """
        prompt = build_writer_prompt(number, topic, headings)
        best: WriterOutcome | None = None
        step_error: StepLimitExceeded | None = None

        for attempt in range(1, self.max_attempts + 1):
            draft = ReportBuffer(report_id=f"draft-{number}-{attempt}")
            try:
                final = self._runner(draft).run(prompt, cancel_event=cancel_event)
                logger.debug("Writer finished experiment %d attempt %d: %s", number, attempt, final[:80])
            except StepLimitExceeded as e:
                # Content appended before the ceiling is still checked below.
                logger.warning("Experiment %d attempt %d: %s", number, attempt, e)
                step_error = e

            outcome = WriterOutcome(number=number, topic=topic, sections=draft.sections(), attempts=attempt)
            check = validate_section(
                outcome.markdown, number, topic, headings, line_limit=self.paragraph_line_limit
            )
            outcome.issues = check.issues
            outcome.warnings = check.warnings
            for warning in check.warnings:
                logger.info("Experiment %d: %s", number, warning)

            if check.ok:
                return outcome
            if outcome.sections:
                best = outcome

            logger.warning(
                "Experiment %d attempt %d/%d rejected: %s",
                number,
                attempt,
                self.max_attempts,
                " ".join(check.issues),
            )
            prompt = build_revision_prompt(number, topic, headings, check.issues)

        if best is None:
            if step_error is not None:
                raise step_error
            raise WriterError(f"Experiment {number} ({topic}): the writer appended no content.")

        logger.warning("Experiment %d committed with unresolved issues: %s", number, " ".join(best.issues))
        return best
