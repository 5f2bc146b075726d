"""Tests for report rendering and export."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import pytest

from mammoguard.report.exporter import REPORT_PREFIX, ReportExporter
from mammoguard.report.generator import (
    NORMAL_DIAGNOSIS,
    DiagnosisReport,
    diagnosis_for,
    format_confidence,
    render,
)
from mammoguard.workflow.models import Submission

if TYPE_CHECKING:
    from pathlib import Path


def _make_submission(**overrides: object) -> Submission:
    defaults: dict[str, object] = {
        "filename": "mammo1.png",
        "prediction": "Malignant",
        "confidence": 0.93,
        "preview": None,
        "timestamp": datetime(2025, 3, 14, 9, 30, 5, tzinfo=timezone.utc),
    }
    defaults.update(overrides)
    return Submission(**defaults)  # type: ignore[arg-type]


class TestDiagnosisReport:
    def test_fields_from_submission(self) -> None:
        report = DiagnosisReport.from_submission(_make_submission())

        assert report.title == "MammoGuard Diagnosis Report"
        assert report.generated == "2025-03-14 09:30:05"
        assert report.filename == "mammo1.png"
        assert report.prediction == "Malignant"
        assert report.confidence == "93.00%"
        assert report.diagnosis == "Signs of breast cancer detected"

    def test_missing_filename_is_na(self) -> None:
        report = DiagnosisReport.from_submission(_make_submission(filename=None))
        assert report.filename == "N/A"

    def test_empty_filename_is_na(self) -> None:
        report = DiagnosisReport.from_submission(_make_submission(filename=""))
        assert report.filename == "N/A"

    @pytest.mark.parametrize(
        ("prediction", "expected"),
        [
            ("Malignant", "Signs of breast cancer detected"),
            ("Benign", "Benign mass found. Monitor if needed."),
            ("Normal", "Breast tissue appears normal"),
            ("Something else", NORMAL_DIAGNOSIS),
        ],
    )
    def test_diagnosis_sentence(self, prediction: str, expected: str) -> None:
        assert diagnosis_for(prediction) == expected

    @pytest.mark.parametrize(
        ("confidence", "expected"),
        [(0.93, "93.00%"), (1.0, "100.00%"), (0.0, "0.00%"), (0.12346, "12.35%"), (0.5, "50.00%")],
    )
    def test_confidence_has_two_decimals(self, confidence: float, expected: str) -> None:
        assert format_confidence(confidence) == expected

    def test_same_submission_same_fields(self) -> None:
        submission = _make_submission()
        assert DiagnosisReport.from_submission(submission) == DiagnosisReport.from_submission(submission)


class TestRender:
    def test_render_produces_pdf(self) -> None:
        content = render(_make_submission())
        assert content.startswith(b"%PDF")

    def test_render_is_deterministic(self) -> None:
        submission = _make_submission()
        assert render(submission) == render(submission)

    def test_render_depends_on_submission(self) -> None:
        submission = _make_submission()
        other = replace(submission, prediction="Benign", confidence=0.5)
        assert render(submission) != render(other)

    def test_render_does_not_modify_submission(self) -> None:
        submission = _make_submission()
        before = replace(submission)
        render(submission)
        assert submission == before


class TestReportExporter:
    def test_filename_derived_from_clock(self) -> None:
        exporter = ReportExporter(clock=lambda: 1_700_000_000_123)
        assert exporter.next_filename() == f"{REPORT_PREFIX}1700000000123.pdf"

    def test_filenames_unique_within_same_millisecond(self) -> None:
        exporter = ReportExporter(clock=lambda: 1_700_000_000_123)
        names = {exporter.next_filename() for _ in range(5)}
        assert len(names) == 5

    def test_export_without_directory_writes_nothing(self, tmp_path: Path) -> None:
        exporter = ReportExporter()
        report = exporter.export(_make_submission())
        assert report.path is None
        assert report.filename.startswith(REPORT_PREFIX)
        assert report.filename.endswith(".pdf")
        assert report.content.startswith(b"%PDF")
        assert list(tmp_path.iterdir()) == []

    def test_export_saves_copy_in_reports_dir(self, tmp_path: Path) -> None:
        reports_dir = tmp_path / "reports"
        exporter = ReportExporter(reports_dir)
        submission = _make_submission()

        first = exporter.export(submission)
        second = exporter.export(submission)

        assert first.path is not None
        assert second.path is not None
        assert first.path != second.path
        assert first.path.read_bytes() == first.content
        assert sorted(p.name for p in reports_dir.iterdir()) == sorted([first.filename, second.filename])
