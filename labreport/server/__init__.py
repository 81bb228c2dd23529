"""HTTP facade for report generation."""

from labreport.server.app import create_app

__all__ = ["create_app"]
