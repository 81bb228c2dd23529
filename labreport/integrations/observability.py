"""Langfuse tracing for the chat models used by the report agents.

Every model built through `get_observed_llm` / `get_observed_gemini_llm` carries
the Langfuse LangChain callback handler when it is configured, so orchestrator
and writer runs show up as traces named after the agent.

Configuration (.env):
    - LANGFUSE_PUBLIC_KEY, LANGFUSE_SECRET_KEY, LANGFUSE_HOST: required to enable
    - LANGFUSE_ENABLED: "false" disables tracing without a warning
"""

from __future__ import annotations

import logging
import os
from typing import Any

from langchain_core.callbacks import BaseCallbackHandler
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)

_langfuse_handler: BaseCallbackHandler | None = None
_langfuse_init_attempted: bool = False


def _tracing_disabled() -> bool:
    return os.getenv("LANGFUSE_ENABLED", "true").lower() == "false"


def _get_langfuse_handler() -> BaseCallbackHandler | None:
    """Create the Langfuse handler once; None when disabled or not configured."""
    global _langfuse_handler, _langfuse_init_attempted

    if _tracing_disabled():
        return None
    if _langfuse_handler is not None:
        return _langfuse_handler
    if _langfuse_init_attempted:
        return None
    _langfuse_init_attempted = True

    missing = [
        var
        for var in ("LANGFUSE_PUBLIC_KEY", "LANGFUSE_SECRET_KEY", "LANGFUSE_HOST")
        if not os.getenv(var)
    ]
    if missing:
        logger.info("Langfuse tracing disabled: missing %s", ", ".join(missing))
        return None

    try:
        from langfuse.langchain import CallbackHandler

        _langfuse_handler = CallbackHandler()
        logger.info("Langfuse tracing enabled (host: %s)", os.getenv("LANGFUSE_HOST"))
        return _langfuse_handler
    except Exception as e:
        logger.warning("Langfuse tracing disabled: initialization failed: %s", e)
        return None


def get_langfuse_callbacks() -> list[BaseCallbackHandler]:
    """Callbacks to pass in a LangChain `config`; empty when tracing is off."""
    handler = _get_langfuse_handler()
    return [handler] if handler else []


def is_observability_enabled() -> bool:
    return _get_langfuse_handler() is not None


def get_observed_llm(
    model: str,
    base_url: str | None = None,
    api_key: str | None = None,
    temperature: float = 0,
    name: str | None = None,
    **kwargs: Any,
) -> BaseChatModel:
    """Create a `ChatOpenAI` for any OpenAI-compatible endpoint (Groq, OpenAI, ...).

    Args:
        model: Model identifier understood by the endpoint.
        base_url: Endpoint URL; the OpenAI default when omitted.
        api_key: Credential for the endpoint.
        temperature: Sampling temperature.
        name: Agent name, used as the trace name.
        **kwargs: Passed through to `ChatOpenAI`.
    """
    llm_kwargs: dict[str, Any] = {"model": model, "temperature": temperature, **kwargs}
    if base_url:
        llm_kwargs["base_url"] = base_url
    if api_key:
        llm_kwargs["api_key"] = api_key

    callbacks = get_langfuse_callbacks()
    if callbacks:
        llm_kwargs["callbacks"] = callbacks
    if name:
        llm_kwargs["name"] = name

    return ChatOpenAI(**llm_kwargs)


def get_observed_gemini_llm(
    model: str,
    api_key: str | None = None,
    temperature: float = 0,
    name: str | None = None,
    **kwargs: Any,
) -> BaseChatModel:
    """Create a Gemini chat model (requires the `gemini` extra)."""
    try:
        from langchain_google_genai import ChatGoogleGenerativeAI
    except ImportError as e:
        raise ImportError(
            "langchain-google-genai not installed. Install with:\n"
            "  pip install 'labreport[gemini]'"
        ) from e

    gemini_api_key = (api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or "").strip()
    if not gemini_api_key:
        raise ValueError("Gemini API key not found. Set GOOGLE_API_KEY or GEMINI_API_KEY.")

    llm_kwargs: dict[str, Any] = {
        "model": model,
        "temperature": temperature,
        "api_key": gemini_api_key,
        **kwargs,
    }
    callbacks = get_langfuse_callbacks()
    if callbacks:
        llm_kwargs["callbacks"] = callbacks
    if name:
        llm_kwargs["name"] = name

    return ChatGoogleGenerativeAI(**llm_kwargs)
