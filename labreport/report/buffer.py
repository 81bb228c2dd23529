"""Append-only report buffers.

A buffer holds the markdown sections of one report, in the order they were
written. Every section is rendered followed by a blank line. Writers never
overwrite or reorder; mutations are serialized by a lock and bump `version`,
which streaming readers wait on.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"


class ReportBuffer:
    """In-memory report buffer."""

    def __init__(self, report_id: str = ""):
        self.report_id = report_id
        self._sections: list[str] = []
        self._version = 0
        self._closed = False
        self._changed = threading.Condition()

    @property
    def version(self) -> int:
        with self._changed:
            return self._version

    @property
    def closed(self) -> bool:
        with self._changed:
            return self._closed

    def sections(self) -> list[str]:
        with self._changed:
            return list(self._sections)

    def read(self) -> str:
        with self._changed:
            return self._render()

    def snapshot(self) -> tuple[int, str, bool]:
        """Return (version, content, closed) read under one lock."""
        with self._changed:
            return self._version, self._render(), self._closed

    def is_empty(self) -> bool:
        return not self.read().strip()

    def append(self, content: str) -> None:
        self.extend([content])

    def extend(self, sections: list[str]) -> None:
        """Append several sections as one atomic change."""
        if not sections:
            return
        with self._changed:
            if self._closed:
                raise RuntimeError(f"Report {self.report_id or '<anonymous>'} is closed")
            self._write(sections)
            self._sections.extend(sections)
            self._version += 1
            self._changed.notify_all()

    def close(self) -> None:
        """Mark the report finished; wakes streaming readers one last time."""
        with self._changed:
            if self._closed:
                return
            self._closed = True
            self._version += 1
            self._changed.notify_all()

    def wait_for_change(self, version: int, timeout: float | None = None) -> int:
        """Block until `version` is outdated or `timeout` elapses; return the current version."""
        with self._changed:
            self._changed.wait_for(lambda: self._version != version, timeout=timeout)
            return self._version

    def _render(self) -> str:
        return "".join(section + SECTION_SEPARATOR for section in self._sections)

    def _write(self, sections: list[str]) -> None:
        """Persistence hook, called under the lock before sections become visible."""


class FileReportBuffer(ReportBuffer):
    """Report buffer persisted to `<directory>/<report_id>.md`.

    Each report gets its own file, so concurrent requests never share one.
    """

    def __init__(self, report_id: str, directory: Path):
        super().__init__(report_id=report_id)
        self.path = Path(directory) / f"{report_id}.md"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")

    def _write(self, sections: list[str]) -> None:
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write("".join(section + SECTION_SEPARATOR for section in sections))
        logger.debug("Appended %d section(s) to %s", len(sections), self.path)

    def read(self) -> str:
        with self._changed:
            try:
                return self.path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return ""
