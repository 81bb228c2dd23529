"""Retry of transient chat-completion failures with capped exponential backoff.

The error types are those of the `openai` client, used for Groq and OpenAI
endpoints. Gemini models retry inside their own client (`max_retries`, set by
`DefaultLLMFactory`); their final errors reach the caller unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import backoff
import openai

from labreport.config import RetryPolicy
from labreport.errors import RemoteServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)


def _on_backoff(details: dict[str, Any]) -> None:
    logger.warning(
        "Chat completion failed (%s); retrying in %.1fs (attempt %d)",
        details.get("exception"),
        details.get("wait") or 0.0,
        details["tries"],
    )


def call_with_retry(fn: Callable[[], T], policy: RetryPolicy, description: str = "chat completion") -> T:
    """Call `fn`, retrying transient transport errors according to `policy`.

    Raises:
        RemoteServiceError: Retries are exhausted, or the API failed with a
            non-transient error (auth, bad request, ...).
    """
    retrying = backoff.on_exception(
        backoff.expo,
        TRANSIENT_ERRORS,
        max_tries=max(1, policy.max_tries),
        factor=policy.factor,
        max_value=policy.max_value,
        jitter=backoff.full_jitter if policy.jitter else None,
        on_backoff=_on_backoff,
    )(fn)
    try:
        return retrying()
    except TRANSIENT_ERRORS as e:
        raise RemoteServiceError(f"{description} failed after {policy.max_tries} attempts: {e}") from e
    except openai.APIError as e:
        raise RemoteServiceError(f"{description} failed: {e}") from e
