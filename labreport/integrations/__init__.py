"""External service integrations (tracing)."""

from labreport.integrations.observability import (
    get_langfuse_callbacks,
    get_observed_gemini_llm,
    get_observed_llm,
    is_observability_enabled,
)

__all__ = [
    "get_langfuse_callbacks",
    "get_observed_gemini_llm",
    "get_observed_llm",
    "is_observability_enabled",
]
