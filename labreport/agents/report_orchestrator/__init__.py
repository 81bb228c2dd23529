"""Report orchestrator (manager agent of the report pipeline)."""

from labreport.agents.report_orchestrator.agent import ORCHESTRATOR_NAME, ReportOrchestrator
from labreport.agents.report_orchestrator.schedule import ExperimentSchedule
from labreport.agents.report_orchestrator.tools import WriteExperiment, create_write_experiment_tool

__all__ = [
    "ORCHESTRATOR_NAME",
    "ExperimentSchedule",
    "ReportOrchestrator",
    "WriteExperiment",
    "create_write_experiment_tool",
]
