from __future__ import annotations

from fastapi import HTTPException, Request

from clipdesk.models.session import EditResult
from services.app_services import AppServices

from routes.schemas import ProcessResponse


def app_services(request: Request) -> AppServices:
    svc: AppServices | None = getattr(request.app.state, "services", None)
    if svc is None:
        raise HTTPException(status_code=500, detail="services not initialized")
    return svc


def download_url(filename: str) -> str:
    return f"/api/download/{filename}"


def to_process_response(result: EditResult) -> ProcessResponse:
    return ProcessResponse(
        output_file=result.output_filename,
        download_url=download_url(result.output_filename),
        version=result.version,
    )
