"""Pydantic contracts for report generation requests and results."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from labreport.errors import ValidationError


class GenerationRequest(BaseModel):
    """A report request: one subject, the experiments in order, headings for every experiment."""

    subject: str = Field(..., description="Subject name shown at the top of the prompt")
    experiments: list[str] = Field(..., min_length=1, description="Experiment topics, in report order")
    headings: list[str] = Field(..., min_length=1, description="Headings every experiment section uses")

    @field_validator("subject")
    @classmethod
    def _subject_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("experiments", "headings")
    @classmethod
    def _items_not_blank(cls, values: list[str]) -> list[str]:
        cleaned = [v.strip() for v in values]
        if any(not v for v in cleaned):
            raise ValueError("must not contain blank entries")
        return cleaned

    def render_prompt(self) -> str:
        """Free-text prompt for the orchestrator."""
        headings = "\n".join(f"- {h}" for h in self.headings)
        experiments = "\n".join(f"{i}. {topic}" for i, topic in enumerate(self.experiments, start=1))
        return (
            f"Subject Name:- {self.subject}\n\n"
            "Generate a report for the following:\n\n"
            f"Headings to include:\n{headings}\n\n"
            f"Experiments:\n{experiments}\n"
        )


class GenerationResult(BaseModel):
    """Outcome of one generation request."""

    report_id: str
    markdown: str
    summary: str = ""
    experiments_written: int = 0


def parse_generation_request(payload: Mapping[str, Any] | None) -> GenerationRequest:
    """Validate a raw request body.

    Raises:
        ValidationError: A field is missing, empty, blank or of the wrong type.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    missing = [f for f in ("subject", "experiments", "headings") if not payload.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    try:
        return GenerationRequest.model_validate(
            {k: payload[k] for k in ("subject", "experiments", "headings")}
        )
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors(include_url=False)
        )
        raise ValidationError(f"Invalid request: {details}") from e
