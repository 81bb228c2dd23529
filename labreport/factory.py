"""LLM factory for centralized chat-model creation and configuration."""

from __future__ import annotations

import os
from typing import Any

from langchain_core.language_models import BaseChatModel

from labreport.config import DEFAULT_GROQ_URL, LabReportSettings
from labreport.integrations.observability import get_observed_gemini_llm, get_observed_llm


class DefaultLLMFactory:
    """Factory for creating configured chat models with tracing attached."""

    def __init__(
        self,
        settings: LabReportSettings | None = None,
        agent_config: dict[str, dict[str, Any]] | None = None,
    ):
        """Initialize the factory.

        Args:
            settings: Provider, model and credential defaults. Read from the
                      environment when omitted.
            agent_config: Per-agent overrides, keyed by agent name
                          (e.g. {"experiment-writer": {"model": "llama-3.3-70b-versatile"}}).
        """
        self.settings = settings or LabReportSettings.from_env()
        self.agent_config = agent_config or {}

    def get_llm(
        self,
        name: str,
        provider: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> BaseChatModel:
        """Get a chat model for the named agent.

        Resolution order is agent overrides > arguments > settings.

        Args:
            name: Agent name (also the trace name).
            provider: 'groq', 'openai' or 'gemini'.
            model: Model identifier.
            temperature: Sampling temperature.
            **kwargs: Additional model arguments.
        """
        overrides = self.agent_config.get(name, {})

        resolved_provider = overrides.get("provider") or provider or self.settings.provider
        resolved_model = overrides.get("model") or model or self.settings.model
        if "temperature" in overrides:
            resolved_temp = overrides["temperature"]
        elif temperature is not None:
            resolved_temp = temperature
        else:
            resolved_temp = self.settings.temperature

        combined_kwargs = {**kwargs, **overrides}
        for key in ("provider", "model", "temperature"):
            combined_kwargs.pop(key, None)

        api_key, base_url = self._credentials(resolved_provider)

        if resolved_provider in ("gemini", "google"):
            # Gemini errors are not openai types; the client's own retries cover transport failures.
            combined_kwargs.setdefault("max_retries", self.settings.retry.max_tries)
            return get_observed_gemini_llm(
                model=resolved_model,
                api_key=combined_kwargs.pop("api_key", None) or api_key,
                temperature=resolved_temp,
                name=name,
                **combined_kwargs,
            )

        if resolved_provider not in ("groq", "openai"):
            raise ValueError(f"Unknown provider: {resolved_provider}")

        api_key = combined_kwargs.pop("api_key", None) or api_key
        if not api_key:
            env_var = "GROQ_API_KEY" if resolved_provider == "groq" else "OPENAI_API_KEY"
            raise ValueError(f"No credentials for provider '{resolved_provider}'. Set {env_var}.")

        base_url = combined_kwargs.pop("base_url", None) or base_url
        if resolved_provider == "groq" and not base_url:
            base_url = DEFAULT_GROQ_URL

        return get_observed_llm(
            model=resolved_model,
            base_url=base_url,
            api_key=api_key,
            temperature=resolved_temp,
            name=name,
            **combined_kwargs,
        )

    def _credentials(self, provider: str) -> tuple[str | None, str | None]:
        """(api_key, base_url) for `provider`; settings only hold those of the configured provider."""
        if provider == self.settings.provider:
            return self.settings.api_key, self.settings.base_url
        if provider == "groq":
            return os.getenv("GROQ_API_KEY"), DEFAULT_GROQ_URL
        if provider == "openai":
            return os.getenv("OPENAI_API_KEY") or os.getenv("API_KEY"), None
        return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"), None
