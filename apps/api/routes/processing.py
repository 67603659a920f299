"""Edit operations. Each successful call records one new session version."""

from __future__ import annotations

from fastapi import APIRouter, Request

from clipdesk.models.session import OperationType
from routes._deps import app_services, download_url, to_process_response
from routes.schemas import (
    MergeRequest,
    MergeResponse,
    MultiTrimJoinRequest,
    ProcessRequest,
    ProcessResponse,
    TrimRequest,
)

router = APIRouter(tags=["processing"])


@router.post("/process/audio-remove", response_model=ProcessResponse)
async def remove_audio(request: Request, payload: ProcessRequest) -> ProcessResponse:
    result = await app_services(request).engine.apply_edit(
        payload.session_id,
        OperationType.AUDIO_REMOVAL,
        file_id=payload.file_id,
        segments=payload.segments,
        source_version=payload.source_version,
    )
    return to_process_response(result)


@router.post("/process/trim", response_model=ProcessResponse)
async def trim(request: Request, payload: TrimRequest) -> ProcessResponse:
    result = await app_services(request).engine.apply_edit(
        payload.session_id,
        OperationType.TRIM,
        file_id=payload.file_id,
        segments=payload.segments,
        source_version=payload.source_version,
        join_segments=payload.join_segments,
    )
    return to_process_response(result)


@router.post("/process/profanity", response_model=ProcessResponse)
async def mute_profanity(request: Request, payload: ProcessRequest) -> ProcessResponse:
    result = await app_services(request).engine.apply_edit(
        payload.session_id,
        OperationType.PROFANITY_FILTER,
        file_id=payload.file_id,
        segments=payload.segments,
        source_version=payload.source_version,
    )
    return to_process_response(result)


@router.post("/process/multi-trim-join", response_model=ProcessResponse)
async def multi_trim_join(request: Request, payload: MultiTrimJoinRequest) -> ProcessResponse:
    result = await app_services(request).engine.multi_trim_join(
        payload.session_id,
        payload.video_segments,
        output_name=payload.output_name,
    )
    return to_process_response(result)


@router.post("/merge-multiple", response_model=MergeResponse)
async def merge_multiple(request: Request, payload: MergeRequest) -> MergeResponse:
    filename = await app_services(request).engine.merge_files(
        payload.session_id,
        payload.file_ids,
        output_name=payload.output_name,
    )
    return MergeResponse(output_file=filename, download_url=download_url(filename))
