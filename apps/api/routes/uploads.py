"""Uploads API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, Form, Request, UploadFile

from clipdesk.exceptions import InvalidInputError
from clipdesk.models.media import FileRecord, MediaKind
from routes._deps import app_services
from routes.schemas import MultipleUploadResponse, SingleUploadResponse
from services.upload_service import UploadService

logger = logging.getLogger("clipdesk.api")

router = APIRouter(tags=["uploads"])


def _single_response(record: FileRecord) -> SingleUploadResponse:
    probe = record.probe_info.to_dict()
    if record.media_kind is MediaKind.VIDEO:
        return SingleUploadResponse(file=record.to_dict(), video_info=probe)
    return SingleUploadResponse(file=record.to_dict(), audio_info=probe)


@router.post("/upload", response_model=SingleUploadResponse, response_model_exclude_none=True)
async def upload_video(
    request: Request,
    video: UploadFile = File(...),
    session_id: str = Form(..., alias="sessionId"),
) -> SingleUploadResponse:
    record = await UploadService(app_services(request)).store(session_id, video)
    return _single_response(record)


@router.post("/upload-audio", response_model=SingleUploadResponse, response_model_exclude_none=True)
async def upload_audio(
    request: Request,
    audio: UploadFile = File(...),
    session_id: str = Form(..., alias="sessionId"),
) -> SingleUploadResponse:
    record = await UploadService(app_services(request)).store(
        session_id, audio, expected_kind=MediaKind.AUDIO
    )
    return _single_response(record)


@router.post("/upload-multiple", response_model=MultipleUploadResponse)
async def upload_multiple(
    request: Request,
    videos: list[UploadFile] = File(...),
    session_id: str = Form(..., alias="sessionId"),
) -> MultipleUploadResponse:
    svc = app_services(request)
    if not videos:
        raise InvalidInputError("No files uploaded")
    limit = int(svc.settings.upload_max_files)
    if len(videos) > limit:
        raise InvalidInputError(f"Too many files: {len(videos)} (limit {limit})")

    await svc.engine.get_session(session_id)
    uploader = UploadService(svc)
    records: list[FileRecord] = []
    for upload in videos:
        records.append(await uploader.store(session_id, upload))
    logger.info("uploaded %d files (session_id=%s)", len(records), session_id)
    return MultipleUploadResponse(files=[r.to_dict() for r in records], session_id=session_id)
