"""`write_experiment`: the orchestrator's only tool, delegating one experiment to the writer."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic import BaseModel, Field

from labreport.agents.experiment_writer import ExperimentWriter, WriterError
from labreport.agents.experiment_writer.validation import normalize_heading
from labreport.errors import StepLimitExceeded
from labreport.report.buffer import ReportBuffer
from labreport.tools.registry import Tool

from .schedule import ExperimentSchedule

logger = logging.getLogger(__name__)

WRITE_EXPERIMENT_TOOL_NAME = "write_experiment"


class WriteExperiment(BaseModel):
    """Delegates writing of a single experiment to the Experiment Writer agent with specific headings."""

    experiment_number: int = Field(..., ge=1, description="The experiment number")
    experiment_topic: str = Field(..., description="The topic of the experiment")
    headings: list[str] = Field(..., description="List of headings to include (e.g., ['Aim', 'Theory'])")
    total_experiments: Optional[int] = Field(None, ge=1, description="Total number of experiments")


def progress_bar(done: int, total: int, width: int = 10) -> str:
    """`[████░░░░░░] 40% (2/5)`"""
    total = max(total, 1)
    percent = round(done / total * 100)
    filled = min(width, percent * width // 100)
    return f"[{'█' * filled}{'░' * (width - filled)}] {percent}% ({done}/{total})"


def create_write_experiment_tool(
    writer: ExperimentWriter,
    schedule: ExperimentSchedule,
    report: ReportBuffer,
    cancel_event: threading.Event | None = None,
) -> Tool:
    """Bind the delegation tool to one request's schedule and report buffer.

    The generated content goes straight into `report`; the orchestrator only
    sees a short confirmation.
    """

    def _write_experiment(args: WriteExperiment) -> str:
        number = args.experiment_number
        rejection = schedule.check(number)
        if rejection:
            logger.warning("Rejected write_experiment(%d): %s", number, rejection)
            return f"Rejected: {rejection}"

        topic = schedule.topic(number)
        headings = list(schedule.request.headings)
        if normalize_heading(args.experiment_topic) != normalize_heading(topic):
            logger.info("Experiment %d: using requested topic %r instead of %r", number, topic, args.experiment_topic)
        if [normalize_heading(h) for h in args.headings] != [normalize_heading(h) for h in headings]:
            logger.info("Experiment %d: using requested headings instead of %s", number, args.headings)

        total = schedule.total
        if args.total_experiments and args.total_experiments != total:
            logger.debug("Ignoring total_experiments=%d, request has %d", args.total_experiments, total)
        logger.info("Progress: %s", progress_bar(number, total))
        logger.info('Writing: "%s"', topic)

        try:
            outcome = writer.write(number, topic, headings, cancel_event=cancel_event)
        except (WriterError, StepLimitExceeded) as e:
            logger.error("Experiment %d failed: %s", number, e)
            return f"Experiment {number} ({topic}) failed: {e} Call write_experiment for experiment {number} again."

        try:
            report.extend(outcome.sections)
        except (OSError, RuntimeError) as e:
            logger.error("Error writing experiment %d: %s", number, e)
            return f"Error writing: {e}"
        schedule.mark_done(number)
        return f"Experiment {number} ({topic}) completed. Ready for next experiment."

    return Tool(name=WRITE_EXPERIMENT_TOOL_NAME, schema=WriteExperiment, handler=_write_experiment)
