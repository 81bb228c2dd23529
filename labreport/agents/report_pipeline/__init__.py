"""Request-level report generation pipeline."""

from labreport.agents.report_pipeline.agent import ReportGenerator

__all__ = ["ReportGenerator"]
