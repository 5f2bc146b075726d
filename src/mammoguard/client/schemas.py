"""Pydantic schemas for the remote classifier's response payload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from mammoguard.client.results import PredictionLabel


class ClassifierPrediction(BaseModel):
    """The ``prediction`` object returned by the classifier."""

    model_config = ConfigDict(populate_by_name=True)

    label: PredictionLabel = Field(alias="class")
    confidence: float = Field(strict=True, ge=0.0, le=1.0, description="Class confidence (0.0-1.0)")


class ClassifierResponse(BaseModel):
    """Top-level classifier response: ``{"prediction": {"class": ..., "confidence": ...}}``."""

    prediction: ClassifierPrediction
