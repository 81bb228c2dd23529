"""Experiment writer (leaf agent of the report pipeline)."""

from labreport.agents.experiment_writer.agent import (
    WRITER_NAME,
    ExperimentWriter,
    WriterError,
    WriterOutcome,
)
from labreport.agents.experiment_writer.validation import SectionCheck, validate_section

__all__ = [
    "WRITER_NAME",
    "ExperimentWriter",
    "SectionCheck",
    "WriterError",
    "WriterOutcome",
    "validate_section",
]
