"""Session model (edit history unit)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from clipdesk.models.media import FileRecord
from clipdesk.models.segment import Segment, serialize_segments

ORIGINAL = "original"


class OperationType(str, Enum):
    AUDIO_REMOVAL = "audio_removal"
    TRIM = "trim"
    PROFANITY_FILTER = "profanity_filter"
    MULTI_TRIM_JOIN = "multi_trim_join"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class VideoSegments:
    """Segments taken from one uploaded video in a multi-video join."""

    video_id: str
    segments: tuple[Segment, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"videoId": self.video_id, "segments": serialize_segments(self.segments)}


@dataclass(frozen=True)
class EditEntry:
    version: int
    operation_type: OperationType
    output_filename: str
    source_version: str
    file_id: str | None = None
    segments: tuple[Segment, ...] = ()
    join_segments: bool | None = None
    video_segments: tuple[VideoSegments, ...] = ()
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "version": int(self.version),
            "type": self.operation_type.value,
            "filename": self.output_filename,
            "sourceVersion": self.source_version,
            "timestamp": self.timestamp.isoformat(),
            "fileId": self.file_id,
        }
        if self.segments:
            out["segments"] = serialize_segments(self.segments)
        if self.join_segments is not None:
            out["joinSegments"] = bool(self.join_segments)
        if self.video_segments:
            out["videoSegments"] = [vs.to_dict() for vs in self.video_segments]
        return out


@dataclass
class Session:
    id: str
    videos: list[FileRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    current_version: int = 0
    history: list[EditEntry] = field(default_factory=list)
    merged_outputs: list[str] = field(default_factory=list)

    def find_file(self, file_id: str) -> FileRecord | None:
        for record in self.videos:
            if record.id == file_id:
                return record
        return None

    def find_version(self, version: int) -> EditEntry | None:
        for entry in self.history:
            if entry.version == version:
                return entry
        return None

    @property
    def available_versions(self) -> list[str]:
        return [ORIGINAL, *[str(e.version) for e in self.history]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "videos": [v.to_dict() for v in self.videos],
            "createdAt": self.created_at.isoformat(),
            "currentVersion": int(self.current_version),
        }


@dataclass(frozen=True)
class EditResult:
    version: int
    output_filename: str


@dataclass(frozen=True)
class HistoryView:
    session: Session
    history: list[EditEntry]
    available_versions: list[str]
