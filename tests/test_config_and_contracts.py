"""Tests for environment settings and request contracts."""

from pathlib import Path

import pytest

from labreport.config import DEFAULT_GROQ_URL, LabReportSettings
from labreport.errors import ValidationError
from labreport.report import parse_generation_request


@pytest.fixture
def clean_env(monkeypatch):
    for var in (
        "LABREPORT_PROVIDER",
        "LABREPORT_MODEL",
        "LABREPORT_STORAGE",
        "LABREPORT_REPORTS_DIR",
        "LABREPORT_ORCHESTRATOR_MAX_STEPS",
        "LABREPORT_WRITER_MAX_STEPS",
        "LABREPORT_MAX_RETRIES",
        "GROQ_API_KEY",
        "OPENAI_API_KEY",
        "API_KEY",
        "MODEL_URL",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_settings_defaults_from_empty_env(clean_env):
    settings = LabReportSettings.from_env()
    assert settings.provider == "groq"
    assert settings.base_url == DEFAULT_GROQ_URL
    assert settings.api_key is None
    assert settings.orchestrator_max_steps == 50
    assert settings.writer_max_steps == 10
    assert settings.storage == "memory"
    assert settings.reports_dir == Path("reports")


def test_settings_read_overrides(clean_env):
    clean_env.setenv("LABREPORT_PROVIDER", "openai")
    clean_env.setenv("API_KEY", "sk-test")
    clean_env.setenv("MODEL_URL", "https://llm.internal/v1")
    clean_env.setenv("LABREPORT_ORCHESTRATOR_MAX_STEPS", "20")
    clean_env.setenv("LABREPORT_MAX_RETRIES", "2")
    clean_env.setenv("LABREPORT_STORAGE", "file")

    settings = LabReportSettings.from_env()

    assert settings.api_key == "sk-test"
    assert settings.base_url == "https://llm.internal/v1"
    assert settings.orchestrator_max_steps == 20
    assert settings.retry.max_tries == 2
    assert settings.storage == "file"


def test_settings_reject_bad_values(clean_env):
    clean_env.setenv("LABREPORT_WRITER_MAX_STEPS", "ten")
    with pytest.raises(ValueError, match="LABREPORT_WRITER_MAX_STEPS"):
        LabReportSettings.from_env()

    clean_env.delenv("LABREPORT_WRITER_MAX_STEPS")
    clean_env.setenv("LABREPORT_STORAGE", "s3")
    with pytest.raises(ValueError, match="LABREPORT_STORAGE"):
        LabReportSettings.from_env()


def test_request_fields_are_trimmed():
    request = parse_generation_request(
        {"subject": " Physics ", "experiments": [" Ohm's Law "], "headings": ["Aim ", " Theory"]}
    )
    assert request.subject == "Physics"
    assert request.experiments == ["Ohm's Law"]
    assert request.headings == ["Aim", "Theory"]


@pytest.mark.parametrize(
    "payload, message",
    [
        (None, "must be a JSON object"),
        (["subject"], "must be a JSON object"),
        ({"subject": "X", "headings": ["Aim"]}, "Missing required fields: experiments"),
        ({"subject": "", "experiments": [], "headings": []}, "subject, experiments, headings"),
        ({"subject": "X", "experiments": "A", "headings": ["Aim"]}, "Invalid request"),
        ({"subject": "X", "experiments": ["A"], "headings": [""]}, "Invalid request"),
    ],
)
def test_invalid_requests(payload, message):
    with pytest.raises(ValidationError, match=message):
        parse_generation_request(payload)


def test_prompt_lists_headings_and_numbered_experiments():
    request = parse_generation_request({"subject": "X", "experiments": ["A", "B"], "headings": ["Aim"]})
    assert request.render_prompt() == (
        "Subject Name:- X\n\n"
        "Generate a report for the following:\n\n"
        "Headings to include:\n- Aim\n\n"
        "Experiments:\n1. A\n2. B\n"
    )
