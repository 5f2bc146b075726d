"""Preview references: revocable display handles bound to image bytes."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewRef:
    """Opaque handle to a registered preview."""

    id: str


@dataclass(frozen=True)
class _Preview:
    data: bytes
    content_type: str


class PreviewRegistry:
    """Issues preview references and releases them.

    Every reference must be revoked exactly once; revoking an unknown or
    already revoked reference raises ``KeyError``.
    """

    def __init__(self) -> None:
        self._previews: dict[str, _Preview] = {}

    def create(self, data: bytes, content_type: str = "application/octet-stream") -> PreviewRef:
        ref = PreviewRef(id=uuid.uuid4().hex)
        self._previews[ref.id] = _Preview(data=data, content_type=content_type)
        logger.debug("Created preview %s (%d bytes)", ref.id, len(data))
        return ref

    def revoke(self, ref: PreviewRef) -> None:
        try:
            del self._previews[ref.id]
        except KeyError:
            raise KeyError(f"Unknown preview: {ref.id}") from None
        logger.debug("Revoked preview %s", ref.id)

    def resolve(self, preview_id: str) -> tuple[bytes, str]:
        """Return ``(data, content_type)`` for a live preview."""
        try:
            preview = self._previews[preview_id]
        except KeyError:
            raise KeyError(f"Unknown preview: {preview_id}") from None
        return preview.data, preview.content_type

    def is_live(self, ref: PreviewRef) -> bool:
        return ref.id in self._previews

    @property
    def live_count(self) -> int:
        return len(self._previews)
