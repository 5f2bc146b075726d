"""Workflow controller: the upload-predict-record state machine.

State transitions:
    Idle --select--> Ready --submit--> InFlight --completion--> Settled
    Settled --select--> Ready, Settled --submit--> InFlight
    any --reset--> Idle

All intents run on the event loop thread. The classifier call is the only
suspension point. Each submit captures the current generation; ``submit`` and
``reset`` bump it, and a completion whose generation no longer matches is
discarded without touching state or history.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from mammoguard.client.results import Failure, FailureReason, Success
from mammoguard.errors import NoFileSelectedError
from mammoguard.workflow.models import SelectedImage, SessionSnapshot, Submission, WorkflowStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from mammoguard.client.prediction import PredictionClient
    from mammoguard.client.results import PredictionResult
    from mammoguard.workflow.history import HistoryLedger
    from mammoguard.workflow.models import ImageFile
    from mammoguard.workflow.previews import PreviewRegistry

    Listener = Callable[[SessionSnapshot], None]

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class WorkflowController:
    """Owns the current attempt and records successful predictions."""

    def __init__(
        self,
        client: PredictionClient,
        ledger: HistoryLedger,
        previews: PreviewRegistry,
        *,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._client = client
        self._ledger = ledger
        self._previews = previews
        self._clock = clock

        self._selected: SelectedImage | None = None
        self._result: PredictionResult | None = None
        self._submission: Submission | None = None
        self._in_flight = False
        self._generation = 0

        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[Listener] = []

    # -- State --------------------------------------------------------------

    @property
    def status(self) -> WorkflowStatus:
        if self._in_flight:
            return WorkflowStatus.IN_FLIGHT
        if self._result is not None:
            return WorkflowStatus.SETTLED
        if self._selected is not None:
            return WorkflowStatus.READY
        return WorkflowStatus.IDLE

    @property
    def selected(self) -> SelectedImage | None:
        return self._selected

    @property
    def result(self) -> PredictionResult | None:
        return self._result

    @property
    def generation(self) -> int:
        return self._generation

    def current_submission(self) -> Submission | None:
        """Return the Submission recorded for the current result, if it succeeded."""
        return self._submission

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self.status,
            selected=self._selected,
            result=self._result,
            submission=self._submission,
            history=self._ledger.all(),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every mutation.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- Intents ------------------------------------------------------------

    def select_file(self, file: ImageFile | None) -> None:
        """Replace the selected image; ``None`` clears the selection only.

        The previous preview is revoked before a new one is created. Selecting
        a file clears the previous result; clearing the selection leaves the
        result and history untouched.
        """
        self._release_selection()
        if file is not None:
            preview = self._previews.create(file.data, file.content_type)
            self._selected = SelectedImage(file=file, preview=preview)
            self._result = None
            self._submission = None
            logger.info("Selected %s (%d bytes)", file.filename or "<unnamed>", len(file.data))
        self._notify()

    def submit(self) -> asyncio.Task[None] | None:
        """Send the selected image to the classifier.

        Returns:
            The task running the request, or ``None`` if a request is already
            in flight.

        Raises:
            NoFileSelectedError: If no image is selected. State is unchanged.
        """
        if self._in_flight:
            logger.debug("Submit ignored: request already in flight")
            return None
        if self._selected is None:
            raise NoFileSelectedError

        loop = asyncio.get_running_loop()
        self._generation += 1
        image = self._selected.file
        self._in_flight = True
        self._result = None
        self._submission = None

        task = loop.create_task(self._complete(self._generation, image))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("Submitted %s (generation %d)", image.filename or "<unnamed>", self._generation)
        self._notify()
        return task

    def reset(self) -> None:
        """Clear selection, result, and in-flight flag. History is kept."""
        self._generation += 1
        self._release_selection()
        self._result = None
        self._submission = None
        self._in_flight = False
        self._notify()

    async def shutdown(self) -> None:
        """Cancel outstanding requests at session end."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._release_selection()

    # -- Internal -----------------------------------------------------------

    async def _complete(self, generation: int, image: ImageFile) -> None:
        try:
            result = await self._client.classify(image.data, image.filename, image.content_type)
        except Exception as exc:
            logger.exception("Prediction client raised for %s", image.filename or "<unnamed>")
            result = Failure(reason=FailureReason.TRANSPORT_FAILURE, detail=str(exc))

        if generation != self._generation:
            logger.debug("Discarding stale completion (generation %d, current %d)", generation, self._generation)
            return

        self._in_flight = False
        self._result = result
        if isinstance(result, Success):
            submission = Submission(
                filename=image.filename,
                prediction=result.label,
                confidence=result.confidence,
                preview=self._previews.create(image.data, image.content_type),
                timestamp=self._clock(),
            )
            self._ledger.append(submission)
            self._submission = submission
        self._notify()

    def _release_selection(self) -> None:
        if self._selected is not None:
            self._previews.revoke(self._selected.preview)
            self._selected = None

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed", listener)
