from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- requests ---------------------------------------------------------------


class ProcessRequest(CamelModel):
    session_id: str
    file_id: str
    # Validated by the engine so errors name the offending segment.
    segments: list[Any] = Field(default_factory=list)
    source_version: str | int = "original"


class TrimRequest(ProcessRequest):
    join_segments: bool = False


class MultiTrimJoinRequest(CamelModel):
    session_id: str
    video_segments: list[Any] = Field(default_factory=list)
    output_name: str | None = None


class MergeRequest(CamelModel):
    session_id: str
    file_ids: list[str] = Field(default_factory=list)
    output_name: str | None = None


class TranscribeRequest(CamelModel):
    session_id: str
    file_id: str


class DetectProfanityRequest(TranscribeRequest):
    custom_words: list[str] = Field(default_factory=list)


class WordsRequest(CamelModel):
    words: list[str] = Field(default_factory=list)


# --- responses --------------------------------------------------------------


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None


class CreateSessionResponse(CamelModel):
    success: bool = True
    session_id: str


class SingleUploadResponse(CamelModel):
    success: bool = True
    kind: Literal["single"] = "single"
    file: dict[str, Any]
    video_info: dict[str, Any] | None = None
    audio_info: dict[str, Any] | None = None


class MultipleUploadResponse(CamelModel):
    success: bool = True
    kind: Literal["multiple"] = "multiple"
    files: list[dict[str, Any]]
    session_id: str


class ProcessResponse(CamelModel):
    success: bool = True
    output_file: str
    download_url: str
    version: int


class MergeResponse(CamelModel):
    success: bool = True
    output_file: str
    download_url: str


class TranscribeResponse(CamelModel):
    success: bool = True
    transcription: dict[str, Any]
    file_id: str
    file_type: str
    processing_info: dict[str, Any]


class DetectProfanityResponse(CamelModel):
    success: bool = True
    profanity_segments: list[dict[str, Any]]
    transcription: dict[str, Any]
    detected_language: str
    language_confidence: float
    file_id: str
    processing_info: dict[str, Any]


class ProfanityListResponse(CamelModel):
    success: bool = True
    custom_profanity_list: list[str]


class HistoryResponse(CamelModel):
    success: bool = True
    session: dict[str, Any]
    history: list[dict[str, Any]]
    available_versions: list[str]


class HealthResponse(CamelModel):
    success: bool = True
    message: str
    time: str
