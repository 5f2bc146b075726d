"""Report export: unique file naming and optional local copies."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from mammoguard.report.generator import render

if TYPE_CHECKING:
    from collections.abc import Callable

    from mammoguard.workflow.models import Submission

logger = logging.getLogger(__name__)

REPORT_PREFIX = "mammoguard_report_"


def _epoch_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class ExportedReport:
    filename: str
    content: bytes
    path: Path | None = None


class ReportExporter:
    """Renders Submissions and names each export uniquely.

    Names are derived from the export time in milliseconds and bumped when two
    exports fall on the same millisecond.
    """

    def __init__(self, reports_dir: str | Path | None = None, *, clock: Callable[[], int] = _epoch_ms) -> None:
        self._reports_dir = Path(reports_dir) if reports_dir is not None else None
        self._clock = clock
        self._last_stamp = 0
        self._stamp_lock = threading.Lock()

    def next_filename(self) -> str:
        with self._stamp_lock:
            stamp = max(self._clock(), self._last_stamp + 1)
            self._last_stamp = stamp
        return f"{REPORT_PREFIX}{stamp}.pdf"

    def export(self, submission: Submission) -> ExportedReport:
        """Render ``submission`` and, if a reports directory is configured, save a copy."""
        filename = self.next_filename()
        content = render(submission)

        path = None
        if self._reports_dir is not None:
            self._reports_dir.mkdir(parents=True, exist_ok=True)
            path = self._reports_dir / filename
            path.write_bytes(content)
            logger.info("Saved report %s", path)
        else:
            logger.info("Exported report %s", filename)
        return ExportedReport(filename=filename, content=content, path=path)
