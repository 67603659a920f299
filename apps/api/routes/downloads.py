"""Serve processed outputs."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from routes._deps import app_services

router = APIRouter(tags=["downloads"])


@router.get("/download/{filename}")
async def download(request: Request, filename: str) -> FileResponse:
    path = app_services(request).files.resolve_download(filename)
    return FileResponse(path, filename=path.name, media_type="video/mp4")
