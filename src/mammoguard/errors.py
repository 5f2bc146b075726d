"""Exceptions raised by the MammoGuard session core."""

from __future__ import annotations


class MammoGuardError(Exception):
    """Base class for MammoGuard errors."""


class NoFileSelectedError(MammoGuardError):
    """Submit was requested without a selected image."""

    def __init__(self) -> None:
        super().__init__("Please select an image first.")


class ReportUnavailableError(MammoGuardError):
    """A report was requested for a result that has no Submission."""
