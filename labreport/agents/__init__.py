"""Agent implementations - runtime, writer, orchestrator and pipeline."""

from labreport.agents.experiment_writer import (
    ExperimentWriter,
    SectionCheck,
    WriterError,
    WriterOutcome,
    validate_section,
)
from labreport.agents.report_orchestrator import (
    ExperimentSchedule,
    ReportOrchestrator,
    WriteExperiment,
)
from labreport.agents.report_pipeline import ReportGenerator
from labreport.agents.runtime import AgentDefinition, AgentRunner, AgentState, create_agent_graph

__all__ = [
    # Runtime
    "AgentDefinition",
    "AgentRunner",
    "AgentState",
    "create_agent_graph",
    # Writer
    "ExperimentWriter",
    "SectionCheck",
    "WriterError",
    "WriterOutcome",
    "validate_section",
    # Orchestrator
    "ExperimentSchedule",
    "ReportOrchestrator",
    "WriteExperiment",
    # Pipeline
    "ReportGenerator",
]
