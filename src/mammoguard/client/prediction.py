"""Prediction client: one HTTP round trip to the remote classifier per call.

Every outcome is folded into a ``PredictionResult``; callers never see an
exception from ``classify``. No retries are performed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import ValidationError

from mammoguard.client.results import Failure, FailureReason, PredictionResult, Success
from mammoguard.client.schemas import ClassifierResponse

if TYPE_CHECKING:
    from mammoguard.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "upload"


class PredictionClient(Protocol):
    """Protocol for classifier clients."""

    async def classify(
        self,
        image_bytes: bytes,
        filename: str | None = None,
        content_type: str = "application/octet-stream",
    ) -> PredictionResult:
        """Classify one image and return a resolved result."""
        ...

    async def aclose(self) -> None:
        """Release any transport resources."""
        ...


class HttpPredictionClient:
    """Posts images as multipart uploads to the classifier endpoint."""

    def __init__(self, url: str, *, timeout: float = 60.0, http_client: httpx.AsyncClient | None = None) -> None:
        self._url = url
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpPredictionClient:
        return cls(settings.classifier_url, timeout=settings.request_timeout)

    @property
    def url(self) -> str:
        return self._url

    async def classify(
        self,
        image_bytes: bytes,
        filename: str | None = None,
        content_type: str = "application/octet-stream",
    ) -> PredictionResult:
        """Send ``image_bytes`` to the classifier.

        Returns:
            ``Success`` for a recognized label and a confidence in [0, 1],
            otherwise ``Failure`` tagged with the transport or payload problem.
        """
        files = {"file": (filename or DEFAULT_UPLOAD_NAME, image_bytes, content_type)}
        try:
            response = await self._http.post(self._url, files=files)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Classifier request to %s failed: %s", self._url, exc)
            return Failure(reason=FailureReason.TRANSPORT_FAILURE, detail=str(exc))

        try:
            payload = ClassifierResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Malformed classifier response from %s: %s", self._url, exc)
            return Failure(reason=FailureReason.MALFORMED_RESPONSE, detail=str(exc))

        prediction = payload.prediction
        logger.info("Classified %s as %s (%.4f)", filename or DEFAULT_UPLOAD_NAME, prediction.label, prediction.confidence)
        return Success(label=prediction.label, confidence=prediction.confidence)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()
