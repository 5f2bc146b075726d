"""Session-scoped, append-only history of successful submissions."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mammoguard.workflow.models import Submission


class HistoryLedger:
    """Most-recent-first record of Submissions. Entries are never removed."""

    def __init__(self) -> None:
        self._entries: deque[Submission] = deque()

    def append(self, submission: Submission) -> None:
        self._entries.appendleft(submission)

    def all(self) -> tuple[Submission, ...]:
        """Return a snapshot of the ledger, newest first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Submission:
        if index < 0:
            raise IndexError(f"History index out of range: {index}")
        try:
            return self._entries[index]
        except IndexError:
            raise IndexError(f"History index out of range: {index}") from None
