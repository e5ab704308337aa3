from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response, StreamingResponse

from export.chart import chart_series, render_trend_png
from export.pdf import export_pdf
from export.spreadsheet import export_xlsx
from models.config import Config
from session.dashboard import DashboardSession
from session.errors import ControlDisabledError
from ..api_models import (
    ChartSeries,
    DetectionItem,
    DetectionsResponse,
    HealthResponse,
    HistoryEntry,
    HistoryResponse,
    SourceResponse,
    StatusResponse,
    ToggleResponse,
)
from ..services.health_service import HealthService
from ..services.stream_service import BOUNDARY, StreamService, encode_png

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_session(request: Request) -> DashboardSession:
    return request.app.state.session


def get_config(request: Request) -> Config:
    return request.app.state.config


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"', "Cache-Control": "no-store"}


@router.get("/status", response_model=StatusResponse)
def status(session: DashboardSession = Depends(get_session)):
    return StatusResponse(**session.snapshot())


@router.get("/health", response_model=HealthResponse)
def health(session: DashboardSession = Depends(get_session), cfg: Config = Depends(get_config)):
    return HealthService(loader=session.loader, upload_dir=cfg.upload_dir).get_health_summary()


@router.post("/source/camera", response_model=SourceResponse)
def select_camera(session: DashboardSession = Depends(get_session)):
    session.select_camera()
    return SourceResponse(source="camera")


@router.post("/source/upload", response_model=SourceResponse)
def select_upload(
    file: UploadFile = File(...),
    session: DashboardSession = Depends(get_session),
    cfg: Config = Depends(get_config),
):
    """
    Save the uploaded image/video and bind it as the frame source.
    The saved copy is deleted on Reset.
    """
    filename = file.filename or "upload"
    os.makedirs(cfg.upload_dir, exist_ok=True)
    path = os.path.join(cfg.upload_dir, f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}")
    with open(path, "wb") as out:
        shutil.copyfileobj(file.file, out)

    try:
        media = session.select_upload(path, filename)
    except ControlDisabledError:
        os.remove(path)
        raise
    return SourceResponse(source="upload", media=media)


@router.post("/processing/toggle", response_model=ToggleResponse)
def toggle_processing(session: DashboardSession = Depends(get_session)):
    result = session.toggle_processing()
    item = HistoryEntry(**result.history_item.to_dict()) if result.history_item else None
    return ToggleResponse(processing=result.processing, count=result.count, history_item=item)


@router.post("/reset", response_model=StatusResponse)
def reset(session: DashboardSession = Depends(get_session)):
    session.reset()
    return StatusResponse(**session.snapshot())


@router.get("/detections", response_model=DetectionsResponse)
def detections(session: DashboardSession = Depends(get_session)):
    result = session.last_result()
    return DetectionsResponse(
        count=result.count,
        frame_index=result.frame_index,
        detections=[DetectionItem(**d.to_dict()) for d in result.detections],
    )


@router.get("/history", response_model=HistoryResponse)
def history(session: DashboardSession = Depends(get_session)):
    return HistoryResponse(
        capacity=session.history.capacity,
        items=[HistoryEntry(**item.to_dict()) for item in session.history_items()],
    )


@router.get("/history/chart", response_model=ChartSeries)
def history_chart(session: DashboardSession = Depends(get_session)):
    return ChartSeries(**chart_series(session.history_items()))


@router.get("/history/chart.png")
def history_chart_png(session: DashboardSession = Depends(get_session)):
    png = render_trend_png(session.history_items())
    return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})


@router.get("/export/report.pdf")
def export_report(session: DashboardSession = Depends(get_session), cfg: Config = Depends(get_config)):
    pdf = export_pdf(session.report_data())
    return Response(content=pdf, media_type="application/pdf", headers=_attachment(cfg.export.report_filename))


@router.get("/export/data.xlsx")
def export_data(session: DashboardSession = Depends(get_session), cfg: Config = Depends(get_config)):
    xlsx = export_xlsx(session.history_items(), sheet_name=cfg.export.sheet_name)
    return Response(content=xlsx, media_type=XLSX_MEDIA_TYPE, headers=_attachment(cfg.export.data_filename))


@router.get("/overlay.png")
def overlay_png(session: DashboardSession = Depends(get_session)):
    """Transparent overlay of the current detections, sized to the current frame."""
    overlay = session.overlay()
    if overlay is None:
        return Response(status_code=204)
    return Response(content=encode_png(overlay), media_type="image/png", headers={"Cache-Control": "no-store"})


@router.get("/stream.mjpg")
def stream(fps: int = 15, overlay: bool = True, session: DashboardSession = Depends(get_session)):
    logging.debug(f"MJPEG stream opened (fps={fps}, overlay={overlay})")
    return StreamingResponse(
        StreamService.mjpeg_stream(session, fps=fps, overlay=overlay),
        media_type=f"multipart/x-mixed-replace; boundary={BOUNDARY}",
    )
