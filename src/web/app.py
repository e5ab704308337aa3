"""
FastAPI application factory for the bike parking monitor.

Routes:
- /          -> dashboard page (Jinja2)
- /api/*     -> JSON API, exports, MJPEG stream
- /static/*  -> dashboard JS/CSS
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from models.config import Config
from session.dashboard import DashboardSession
from session.errors import (
    ControlDisabledError,
    DashboardError,
    ModelNotReadyError,
    SourceBusyError,
    SourceUnavailableError,
    UnsupportedMediaError,
)
from .routes import api, pages

STATIC_PATH = Path(__file__).resolve().parent / "static"

ERROR_STATUS = {
    ControlDisabledError: 409,
    ModelNotReadyError: 409,
    SourceBusyError: 409,
    SourceUnavailableError: 503,
    UnsupportedMediaError: 415,
}


def _status_for(exc: DashboardError) -> int:
    for exc_type, code in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            return code
    return 400


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    code = _status_for(exc)
    logging.warning(f"{request.method} {request.url.path} -> {code}: {exc}")
    return JSONResponse({"detail": str(exc), "error": type(exc).__name__}, status_code=code)


def create_app(session: DashboardSession, config: Config) -> FastAPI:
    """Create the FastAPI app around a session and wire routes/static assets."""
    app = FastAPI(
        title="BikePark Monitor",
        version="0.1.0",
        description="Bicycle parking occupancy dashboard",
    )
    app.state.session = session
    app.state.config = config

    app.add_exception_handler(DashboardError, dashboard_error_handler)

    app.include_router(api.router, prefix="/api")
    app.include_router(pages.router)

    if STATIC_PATH.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_PATH)), name="static")

    return app
