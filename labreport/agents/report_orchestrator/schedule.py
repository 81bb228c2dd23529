"""Tracks which experiment the orchestrator must delegate next."""

from __future__ import annotations

import threading

from labreport.report.contracts import GenerationRequest


class ExperimentSchedule:
    """The ordered experiments of one request and a cursor over them.

    Experiments are numbered from 1. Only the next pending number is accepted,
    so the report can never skip, reorder or repeat an experiment.
    """

    def __init__(self, request: GenerationRequest):
        self.request = request
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        return len(self.request.experiments)

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    @property
    def next_number(self) -> int | None:
        with self._lock:
            return self._completed + 1 if self._completed < self.total else None

    def is_complete(self) -> bool:
        return self.next_number is None

    def topic(self, number: int) -> str:
        return self.request.experiments[number - 1]

    def check(self, number: int) -> str | None:
        """Why `number` may not be written now, or None if it is next."""
        expected = self.next_number
        if expected is None:
            return f"All {self.total} experiments are already written. Give the final summary."
        if number == expected:
            return None
        if 1 <= number < expected:
            return (
                f"Experiment {number} is already written. "
                f"Continue with experiment {expected}: {self.topic(expected)}."
            )
        return f"Experiments must be written in order. Write experiment {expected}: {self.topic(expected)} next."

    def mark_done(self, number: int) -> None:
        with self._lock:
            if number != self._completed + 1:
                raise ValueError(f"Experiment {number} completed out of order")
            self._completed = number
