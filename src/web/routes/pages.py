"""
Page routes for the dashboard web interface.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@router.get("/", response_class=HTMLResponse)
def dashboard(request: Request):
    """Dashboard page: status, viewport, controls, chart, history and exports."""
    session = request.app.state.session
    cfg = request.app.state.config
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "status": session.snapshot(),
            "model_name": cfg.detection.model,
            "target_classes": cfg.detection.target_classes,
            "history_capacity": cfg.history.capacity,
        },
    )
