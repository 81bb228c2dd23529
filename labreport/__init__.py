"""labreport - experiment report generation with an orchestrator/writer agent pair."""

__version__ = "0.1.0"
