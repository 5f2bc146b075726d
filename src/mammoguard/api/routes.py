"""API route definitions.

Each route forwards one user intent to the session and answers with a fresh
snapshot of the session state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from mammoguard.api.schemas import ErrorResponse, HealthResponse, StateResponse, SubmitResponse
from mammoguard.errors import NoFileSelectedError, ReportUnavailableError
from mammoguard.session import CURRENT
from mammoguard.workflow.models import ImageFile

if TYPE_CHECKING:
    from mammoguard.config import Settings
    from mammoguard.session import ReportTarget, Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_session(request: Request) -> Session:
    session: Session = request.app.state.session
    return session


def _state(session: Session) -> StateResponse:
    return StateResponse.from_snapshot(session.controller.snapshot())


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    settings = _get_settings(request)
    session = _get_session(request)
    return HealthResponse(
        status="ok",
        classifier_url=settings.classifier_url,
        state=session.controller.status,
        history_size=len(session.history),
    )


@router.get(
    "/state",
    response_model=StateResponse,
    summary="Current session state",
)
async def get_state(request: Request) -> StateResponse:
    return _state(_get_session(request))


@router.post(
    "/file",
    response_model=StateResponse,
    responses={
        status.HTTP_413_CONTENT_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
    },
    summary="Select an image",
)
async def select_file(request: Request, file: UploadFile) -> StateResponse:
    """Replace the selected image with the uploaded one."""
    settings = _get_settings(request)
    session = _get_session(request)

    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Expected an image upload, got '{content_type or 'unknown'}'",
        )

    data = await file.read()
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File exceeds {settings.max_file_size} bytes",
        )

    session.controller.select_file(ImageFile(data=data, filename=file.filename, content_type=content_type))
    return _state(session)


@router.delete(
    "/file",
    response_model=StateResponse,
    summary="Clear the selected image",
)
async def clear_file(request: Request) -> StateResponse:
    session = _get_session(request)
    session.controller.select_file(None)
    return _state(session)


@router.post(
    "/submit",
    response_model=SubmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
    summary="Submit the selected image for classification",
)
async def submit(request: Request) -> SubmitResponse:
    """Start a prediction. Poll ``/state`` for the result."""
    session = _get_session(request)
    try:
        task = session.controller.submit()
    except NoFileSelectedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None
    return SubmitResponse(accepted=task is not None, state=_state(session))


@router.post(
    "/reset",
    response_model=StateResponse,
    summary="Reset the current attempt",
)
async def reset(request: Request) -> StateResponse:
    session = _get_session(request)
    session.controller.reset()
    return _state(session)


@router.get(
    "/previews/{preview_id}",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Fetch a preview image",
)
async def get_preview(request: Request, preview_id: str) -> Response:
    session = _get_session(request)
    try:
        data, content_type = session.previews.resolve(preview_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preview not found") from None
    return Response(content=data, media_type=content_type)


async def _report_response(session: Session, target: ReportTarget) -> Response:
    try:
        submission = session.resolve_report(target)
    except ReportUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from None

    # Rendering and file writes run in the default executor, off the event loop thread.
    loop = asyncio.get_running_loop()
    report = await loop.run_in_executor(None, session.exporter.export, submission)
    return Response(
        content=report.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


@router.get(
    "/reports/current",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Download a report for the current result",
)
async def current_report(request: Request) -> Response:
    return await _report_response(_get_session(request), CURRENT)


@router.get(
    "/reports/history/{index}",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Download a report for a history entry",
)
async def history_report(request: Request, index: int) -> Response:
    return await _report_response(_get_session(request), index)
