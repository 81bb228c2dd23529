"""Request-scoped report buffers, keyed by report id."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from pathlib import Path

from labreport.report.buffer import FileReportBuffer, ReportBuffer

logger = logging.getLogger(__name__)


class ReportStore:
    """Holds one buffer per report; keeps at most `max_reports`, evicting the oldest.

    `storage="file"` gives each report its own markdown file under `reports_dir`.
    """

    def __init__(self, storage: str = "memory", reports_dir: Path | str = "reports", max_reports: int = 32):
        if storage not in {"memory", "file"}:
            raise ValueError(f"Unknown storage: {storage}")
        self.storage = storage
        self.reports_dir = Path(reports_dir)
        self.max_reports = max(1, max_reports)
        self._reports: OrderedDict[str, ReportBuffer] = OrderedDict()
        self._lock = threading.Lock()

    def create(self, report_id: str | None = None) -> ReportBuffer:
        report_id = report_id or uuid.uuid4().hex
        with self._lock:
            # Checked before the buffer exists: a file buffer truncates its file.
            if report_id in self._reports:
                raise ValueError(f"Report '{report_id}' already exists")
            if self.storage == "file":
                buffer: ReportBuffer = FileReportBuffer(report_id=report_id, directory=self.reports_dir)
            else:
                buffer = ReportBuffer(report_id=report_id)
            self._reports[report_id] = buffer
            while len(self._reports) > self.max_reports:
                evicted, _ = self._reports.popitem(last=False)
                logger.info("Evicted report %s", evicted)
        return buffer

    def get(self, report_id: str) -> ReportBuffer | None:
        with self._lock:
            return self._reports.get(report_id)

    def latest(self) -> ReportBuffer | None:
        with self._lock:
            if not self._reports:
                return None
            return next(reversed(self._reports.values()))

    def resolve(self, report_id: str | None) -> ReportBuffer | None:
        """The named report, or the most recent one when no id is given."""
        return self.get(report_id) if report_id else self.latest()

    def pdf_path(self, report_id: str) -> Path:
        return self.reports_dir / f"{report_id}.pdf"

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)
