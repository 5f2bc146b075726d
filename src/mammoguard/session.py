"""Session: owns the workflow state for one user session.

Constructed at startup and passed by reference to the presentation layer.
History and its previews live until ``close()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from mammoguard.client.prediction import HttpPredictionClient
from mammoguard.errors import ReportUnavailableError
from mammoguard.report.exporter import ReportExporter
from mammoguard.workflow.controller import WorkflowController
from mammoguard.workflow.history import HistoryLedger
from mammoguard.workflow.previews import PreviewRegistry

if TYPE_CHECKING:
    from types import TracebackType

    from mammoguard.client.prediction import PredictionClient
    from mammoguard.config import Settings
    from mammoguard.report.exporter import ExportedReport
    from mammoguard.workflow.models import Submission

logger = logging.getLogger(__name__)

CURRENT = "current"

ReportTarget = Literal["current"] | int


class Session:
    """Bundles the controller, history, previews, and report export."""

    def __init__(
        self,
        client: PredictionClient,
        *,
        exporter: ReportExporter | None = None,
    ) -> None:
        self.client = client
        self.previews = PreviewRegistry()
        self.history = HistoryLedger()
        self.controller = WorkflowController(client, self.history, self.previews)
        self.exporter = exporter if exporter is not None else ReportExporter()
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Session:
        return cls(
            HttpPredictionClient.from_settings(settings),
            exporter=ReportExporter(settings.reports_dir),
        )

    def resolve_report(self, target: ReportTarget) -> Submission:
        """Return the Submission a report request refers to.

        Raises:
            ReportUnavailableError: If the current result is not a success or
                the history index does not exist.
        """
        if target == CURRENT:
            submission = self.controller.current_submission()
            if submission is None:
                raise ReportUnavailableError("No successful prediction to report")
            return submission
        try:
            return self.history[int(target)]
        except IndexError:
            raise ReportUnavailableError(f"No history entry at index {target}") from None

    def export_report(self, target: ReportTarget) -> ExportedReport:
        return self.exporter.export(self.resolve_report(target))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.controller.shutdown()
        for submission in self.history.all():
            if submission.preview is not None:
                self.previews.revoke(submission.preview)
        await self.client.aclose()
        logger.info("Session closed (%d submissions)", len(self.history))

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
