"""Core data models for ClipDesk."""

from clipdesk.models.media import (
    AudioStreamInfo,
    FileRecord,
    MediaKind,
    ProbeInfo,
    VideoStreamInfo,
)
from clipdesk.models.segment import Segment, normalize_segments, serialize_segments
from clipdesk.models.session import (
    ORIGINAL,
    EditEntry,
    EditResult,
    HistoryView,
    OperationType,
    Session,
    VideoSegments,
)
from clipdesk.models.transcript import (
    FlaggedWord,
    ProfanitySource,
    ProfanitySpan,
    Transcription,
    TranscriptSegment,
    TranscriptWord,
)

__all__ = [
    "ORIGINAL",
    "AudioStreamInfo",
    "EditEntry",
    "EditResult",
    "FileRecord",
    "FlaggedWord",
    "HistoryView",
    "MediaKind",
    "OperationType",
    "ProbeInfo",
    "ProfanitySource",
    "ProfanitySpan",
    "Segment",
    "Session",
    "Transcription",
    "TranscriptSegment",
    "TranscriptWord",
    "VideoSegments",
    "VideoStreamInfo",
    "normalize_segments",
    "serialize_segments",
]
