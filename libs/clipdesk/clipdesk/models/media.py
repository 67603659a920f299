"""Uploaded media records and probe results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class MediaKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"

    @property
    def canonical_suffix(self) -> str:
        return ".mp4" if self is MediaKind.VIDEO else ".mp3"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class VideoStreamInfo:
    codec: str | None = None
    resolution: str | None = None
    fps: str | None = None
    bitrate: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "codec": self.codec,
            "resolution": self.resolution,
            "fps": self.fps,
            "bitrate": self.bitrate,
        }


@dataclass(frozen=True)
class AudioStreamInfo:
    codec: str | None = None
    channels: int | None = None
    sample_rate: int | None = None
    bitrate: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "codec": self.codec,
            "channels": self.channels,
            "sampleRate": self.sample_rate,
            "bitrate": self.bitrate,
        }


@dataclass(frozen=True)
class ProbeInfo:
    duration: float | None
    format: str | None
    size: int | None = None
    video: VideoStreamInfo | None = None
    audio: AudioStreamInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "duration": self.duration,
            "size": self.size,
            "format": self.format,
        }
        if self.video is not None:
            out["video"] = self.video.to_dict()
        if self.audio is not None:
            out["audio"] = self.audio.to_dict()
        return out


@dataclass(frozen=True)
class FileRecord:
    """An uploaded file, already converted to its canonical container."""

    id: str
    original_name: str
    stored_filename: str
    path: str
    size_bytes: int
    media_kind: MediaKind
    probe_info: ProbeInfo
    uploaded_at: datetime = field(default_factory=_utcnow)

    @property
    def duration(self) -> float | None:
        return self.probe_info.duration

    def to_dict(self) -> dict[str, Any]:
        info_key = "videoInfo" if self.media_kind is MediaKind.VIDEO else "audioInfo"
        return {
            "id": self.id,
            "originalName": self.original_name,
            "filename": self.stored_filename,
            "size": int(self.size_bytes),
            "path": self.path,
            "uploadedAt": self.uploaded_at.isoformat(),
            "fileType": self.media_kind.value,
            info_key: self.probe_info.to_dict(),
        }
