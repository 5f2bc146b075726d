"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mammoguard.api.routes import router
from mammoguard.config import get_settings
from mammoguard.session import Session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: start a session on startup, release it on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting MammoGuard (classifier=%s, timeout=%ss, reports_dir=%s)",
        settings.classifier_url,
        settings.request_timeout,
        settings.reports_dir,
    )

    session = Session.from_settings(settings)
    app.state.session = session

    logger.info("MammoGuard ready")
    yield

    logger.info("Shutting down MammoGuard")
    await session.close()
    logger.info("MammoGuard shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="MammoGuard",
        description="Upload, predict, record and report workflow for breast imaging screening",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run("mammoguard.main:app", host=settings.host, port=settings.port)
