"""Typed prediction results produced by the prediction client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

ERROR_LABEL = "Error"


class PredictionLabel(StrEnum):
    MALIGNANT = "Malignant"
    BENIGN = "Benign"
    NORMAL = "Normal"


class FailureReason(StrEnum):
    TRANSPORT_FAILURE = "TransportFailure"
    MALFORMED_RESPONSE = "MalformedResponse"


@dataclass(frozen=True)
class Success:
    """A well-formed classification from the remote service."""

    label: PredictionLabel
    confidence: float

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A failed classification attempt.

    Failures are shown as a generic error class with zero confidence.
    """

    reason: FailureReason
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @property
    def label(self) -> str:
        return ERROR_LABEL

    @property
    def confidence(self) -> float:
        return 0.0


PredictionResult = Success | Failure
