"""Runtime configuration read from the environment (.env supported via python-dotenv)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_GROQ_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "openai/gpt-oss-120b"


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class RetryPolicy:
    """Capped exponential backoff for transient chat-completion failures."""

    max_tries: int = 4
    factor: float = 1.0
    max_value: float = 30.0  # seconds, cap for a single wait
    jitter: bool = True


@dataclass(frozen=True)
class LabReportSettings:
    """Settings for report generation and the HTTP facade."""

    provider: str = "groq"  # groq | openai | gemini
    model: str = DEFAULT_MODEL
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = 0
    orchestrator_max_steps: int = 50
    writer_max_steps: int = 10
    writer_max_attempts: int = 2
    paragraph_line_limit: int = 4
    storage: str = "memory"  # memory | file
    reports_dir: Path = Path("reports")
    stream_interval: float = 1.0
    max_reports: int = 32
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @classmethod
    def from_env(cls) -> "LabReportSettings":
        provider = (os.getenv("LABREPORT_PROVIDER") or "groq").strip().lower()
        if provider == "groq":
            api_key = os.getenv("GROQ_API_KEY")
            base_url = os.getenv("MODEL_URL") or DEFAULT_GROQ_URL
        elif provider == "openai":
            api_key = os.getenv("OPENAI_API_KEY") or os.getenv("API_KEY")
            base_url = os.getenv("MODEL_URL")
        else:
            api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
            base_url = None

        storage = (os.getenv("LABREPORT_STORAGE") or "memory").strip().lower()
        if storage not in {"memory", "file"}:
            raise ValueError(f"LABREPORT_STORAGE must be 'memory' or 'file', got {storage!r}")

        return cls(
            provider=provider,
            model=(os.getenv("LABREPORT_MODEL") or DEFAULT_MODEL).strip(),
            api_key=api_key,
            base_url=base_url,
            temperature=_env_float("LABREPORT_TEMPERATURE", 0),
            orchestrator_max_steps=_env_int("LABREPORT_ORCHESTRATOR_MAX_STEPS", 50),
            writer_max_steps=_env_int("LABREPORT_WRITER_MAX_STEPS", 10),
            writer_max_attempts=_env_int("LABREPORT_WRITER_MAX_ATTEMPTS", 2),
            storage=storage,
            reports_dir=Path(os.getenv("LABREPORT_REPORTS_DIR") or "reports"),
            stream_interval=_env_float("LABREPORT_STREAM_INTERVAL", 1.0),
            max_reports=_env_int("LABREPORT_MAX_REPORTS", 32),
            retry=RetryPolicy(max_tries=_env_int("LABREPORT_MAX_RETRIES", 4)),
        )
