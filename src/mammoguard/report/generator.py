"""Diagnosis report rendering.

The report is a single A4 page rasterized with Pillow and saved as PDF.
Rendering depends only on the Submission: the PDF metadata dates come from
the Submission timestamp, so the same Submission always renders to the same
bytes.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFont

from mammoguard.client.results import PredictionLabel

if TYPE_CHECKING:
    from datetime import datetime

    from mammoguard.workflow.models import Submission

REPORT_TITLE = "MammoGuard Diagnosis Report"
MISSING_FILENAME = "N/A"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DIAGNOSES: dict[str, str] = {
    PredictionLabel.MALIGNANT: "Signs of breast cancer detected",
    PredictionLabel.BENIGN: "Benign mass found. Monitor if needed.",
}
NORMAL_DIAGNOSIS = "Breast tissue appears normal"

# Page geometry in millimetres (A4), rasterized at RESOLUTION dpi.
RESOLUTION = 150.0
PAGE_MM = (210.0, 297.0)
MARGIN_LEFT_MM = 20.0
SEPARATOR_RIGHT_MM = 190.0

_DARK = (33, 37, 41)
_MUTED = (100, 100, 100)
_RULE = (200, 200, 200)
_ITALIC_GREY = (90, 90, 90)


def format_confidence(confidence: float) -> str:
    """Format a 0-1 confidence as a percentage with two decimals."""
    return f"{confidence * 100:.2f}%"


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime(TIMESTAMP_FORMAT)


def diagnosis_for(prediction: str) -> str:
    return DIAGNOSES.get(prediction, NORMAL_DIAGNOSIS)


@dataclass(frozen=True)
class DiagnosisReport:
    """Text content of one report, in layout order."""

    title: str
    generated: str
    filename: str
    prediction: str
    confidence: str
    diagnosis: str

    @classmethod
    def from_submission(cls, submission: Submission) -> DiagnosisReport:
        return cls(
            title=REPORT_TITLE,
            generated=format_timestamp(submission.timestamp),
            filename=submission.filename or MISSING_FILENAME,
            prediction=submission.prediction,
            confidence=format_confidence(submission.confidence),
            diagnosis=diagnosis_for(submission.prediction),
        )


def _mm(value: float) -> int:
    return round(value * RESOLUTION / 25.4)


def _font(points: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=round(points * RESOLUTION / 72))


def _text(draw: ImageDraw.ImageDraw, baseline_mm: float, text: str, points: int, fill: tuple[int, int, int]) -> None:
    font = _font(points)
    # Positions are baselines; Pillow anchors at the top-left.
    top = _mm(baseline_mm) - round(points * RESOLUTION / 72)
    draw.text((_mm(MARGIN_LEFT_MM), top), text, font=font, fill=fill)


def render(submission: Submission) -> bytes:
    """Render ``submission`` into PDF bytes. Does not modify the Submission."""
    report = DiagnosisReport.from_submission(submission)

    page = Image.new("RGB", (_mm(PAGE_MM[0]), _mm(PAGE_MM[1])), "white")
    draw = ImageDraw.Draw(page)

    _text(draw, 25, report.title, 22, _DARK)
    _text(draw, 35, f"Generated: {report.generated}", 12, _MUTED)
    draw.line(
        [(_mm(MARGIN_LEFT_MM), _mm(40)), (_mm(SEPARATOR_RIGHT_MM), _mm(40))],
        fill=_RULE,
        width=max(1, _mm(0.3)),
    )
    _text(draw, 55, f"File: {report.filename}", 14, _DARK)
    _text(draw, 65, f"Prediction: {report.prediction}", 14, _DARK)
    _text(draw, 75, f"Confidence: {report.confidence}", 14, _DARK)
    _text(draw, 90, f"Diagnosis: {report.diagnosis}", 14, _ITALIC_GREY)

    stamp = submission.timestamp.utctimetuple()
    buffer = io.BytesIO()
    page.save(
        buffer,
        format="PDF",
        resolution=RESOLUTION,
        title=REPORT_TITLE,
        creationDate=stamp,
        modDate=stamp,
    )
    return buffer.getvalue()
