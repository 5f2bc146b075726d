"""Data types for the upload-predict-record workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from mammoguard.client.results import PredictionResult
    from mammoguard.workflow.previews import PreviewRef


class WorkflowStatus(StrEnum):
    IDLE = "idle"
    READY = "ready"
    IN_FLIGHT = "in_flight"
    SETTLED = "settled"


@dataclass(frozen=True)
class ImageFile:
    """Raw image bytes as handed over by the presentation layer."""

    data: bytes
    filename: str | None = None
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class SelectedImage:
    """The image of the current attempt and its live preview."""

    file: ImageFile
    preview: PreviewRef

    @property
    def filename(self) -> str | None:
        return self.file.filename


@dataclass(frozen=True)
class Submission:
    """One successful prediction, recorded in the history ledger.

    ``timestamp`` is the moment the result arrived, not the moment of submit.
    """

    filename: str | None
    prediction: str
    confidence: float
    preview: PreviewRef | None
    timestamp: datetime


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to the presentation layer."""

    status: WorkflowStatus
    selected: SelectedImage | None
    result: PredictionResult | None
    submission: Submission | None
    history: tuple[Submission, ...]

    @property
    def in_flight(self) -> bool:
        return self.status is WorkflowStatus.IN_FLIGHT
