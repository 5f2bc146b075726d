"""Pydantic response schemas for the MammoGuard intent API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from mammoguard.client.results import PredictionLabel
from mammoguard.report.generator import format_confidence, format_timestamp
from mammoguard.workflow.models import SessionSnapshot, Submission, WorkflowStatus

PREVIEW_PATH = "/api/v1/previews/{preview_id}"

RESULT_MESSAGES: dict[str, str] = {
    PredictionLabel.MALIGNANT: "Warning: Signs of breast cancer detected!",
    PredictionLabel.BENIGN: "Benign mass found. Not cancer, but monitor if needed.",
    PredictionLabel.NORMAL: "Breast tissue appears normal.",
}


def preview_url(preview_id: str | None) -> str | None:
    if preview_id is None:
        return None
    return PREVIEW_PATH.format(preview_id=preview_id)


class ResultView(BaseModel):
    """The result banner for the current attempt."""

    ok: bool
    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    confidence_text: str = Field(description="Confidence as a percentage with two decimals")
    css_class: str
    message: str | None = None
    reason: str | None = Field(default=None, description="Failure reason, if the attempt failed")


class HistoryItem(BaseModel):
    """A single history ledger entry."""

    index: int
    filename: str | None
    prediction: str
    confidence: float
    confidence_text: str
    timestamp: datetime
    generated: str
    preview_url: str | None


class StateResponse(BaseModel):
    """Snapshot of the session for rendering."""

    status: WorkflowStatus
    in_flight: bool
    filename: str | None = None
    preview_url: str | None = None
    result: ResultView | None = None
    report_available: bool = False
    history: list[HistoryItem]

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> StateResponse:
        selected = snapshot.selected
        result = None
        if snapshot.result is not None:
            outcome = snapshot.result
            result = ResultView(
                ok=outcome.ok,
                label=str(outcome.label),
                confidence=outcome.confidence,
                confidence_text=format_confidence(outcome.confidence),
                css_class=outcome.label.lower(),
                message=RESULT_MESSAGES.get(outcome.label),
                reason=None if outcome.ok else str(outcome.reason),
            )
        return cls(
            status=snapshot.status,
            in_flight=snapshot.in_flight,
            filename=selected.filename if selected is not None else None,
            preview_url=preview_url(selected.preview.id) if selected is not None else None,
            result=result,
            report_available=snapshot.submission is not None,
            history=[_history_item(i, s) for i, s in enumerate(snapshot.history)],
        )


def _history_item(index: int, submission: Submission) -> HistoryItem:
    return HistoryItem(
        index=index,
        filename=submission.filename,
        prediction=str(submission.prediction),
        confidence=submission.confidence,
        confidence_text=format_confidence(submission.confidence),
        timestamp=submission.timestamp,
        generated=format_timestamp(submission.timestamp),
        preview_url=preview_url(submission.preview.id if submission.preview is not None else None),
    )


class SubmitResponse(BaseModel):
    """Response for the submit intent."""

    accepted: bool = Field(description="False if a request was already in flight")
    state: StateResponse


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    classifier_url: str
    state: WorkflowStatus
    history_size: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
