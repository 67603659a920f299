"""Transcription and profanity detection routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from routes._deps import app_services
from routes.schemas import (
    DetectProfanityRequest,
    DetectProfanityResponse,
    TranscribeRequest,
    TranscribeResponse,
)

router = APIRouter(tags=["transcription"])


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(request: Request, payload: TranscribeRequest) -> TranscribeResponse:
    svc = app_services(request)
    record = await svc.engine.find_file(payload.session_id, payload.file_id)
    outcome = await svc.transcription.transcribe_file(record)
    return TranscribeResponse(
        transcription=outcome.transcription.to_dict(),
        file_id=record.id,
        file_type=record.media_kind.value,
        processing_info={"audioSizeMB": outcome.audio_size_mb, "method": "direct"},
    )


@router.post("/detect-profanity", response_model=DetectProfanityResponse)
async def detect_profanity(
    request: Request, payload: DetectProfanityRequest
) -> DetectProfanityResponse:
    svc = app_services(request)
    record = await svc.engine.find_file(payload.session_id, payload.file_id)
    active = svc.custom_words.union(payload.custom_words)
    report = await svc.transcription.detect_profanity(record, active)
    return DetectProfanityResponse(
        profanity_segments=[span.to_dict() for span in report.spans],
        transcription=report.transcription.to_dict(),
        detected_language=report.transcription.detected_language,
        language_confidence=report.transcription.language_confidence,
        file_id=record.id,
        processing_info={
            "audioSizeMB": report.audio_size_mb,
            "profanitySources": sorted({span.source.value for span in report.spans}),
        },
    )
