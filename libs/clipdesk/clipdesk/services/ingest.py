"""Upload pipeline: classify, convert to the canonical container, probe."""

from __future__ import annotations

import logging
from pathlib import Path

from clipdesk.error_codes import ErrorCode
from clipdesk.exceptions import ClipDeskError, InvalidInputError
from clipdesk.models.media import FileRecord, MediaKind
from clipdesk.providers.media.base import MediaProvider

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset(
    {".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv", ".m4v", ".3gp"}
)
AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a", ".wma"})
ALLOWED_EXTENSIONS = VIDEO_EXTENSIONS | AUDIO_EXTENSIONS


def detect_media_kind(filename: str, content_type: str | None = None) -> MediaKind:
    """Classify an upload by MIME type, then by extension."""
    mime = str(content_type or "").strip().lower()
    suffix = Path(str(filename or "")).suffix.lower()
    if mime.startswith("video/") and suffix in ALLOWED_EXTENSIONS | {""}:
        return MediaKind.VIDEO
    if mime.startswith("audio/") and suffix in ALLOWED_EXTENSIONS | {""}:
        return MediaKind.AUDIO
    if suffix in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if suffix in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    raise InvalidInputError(
        f"Unsupported file type: {filename!r}. Only video and audio files are allowed.",
        error_code=ErrorCode.INVALID_MEDIA,
    )


class MediaIngestService:
    def __init__(self, media: MediaProvider) -> None:
        self.media = media

    async def ingest(
        self,
        path: str | Path,
        original_name: str,
        content_type: str | None,
        size_bytes: int,
        *,
        file_id: str | None = None,
        expected_kind: MediaKind | None = None,
    ) -> FileRecord:
        """Turn a stored upload into a FileRecord.

        The raw file is replaced by its converted form; on any failure the
        raw upload is removed so nothing orphaned stays in the uploads area.
        """
        src = Path(path)
        stored = src
        try:
            kind = detect_media_kind(original_name, content_type)
            if expected_kind is not None and kind is not expected_kind:
                raise InvalidInputError(
                    f"Only {expected_kind.value} files are allowed (got {original_name!r})",
                    error_code=ErrorCode.INVALID_MEDIA,
                )
            stored = Path(await self.media.convert_container(str(src), kind))
            probe = await self.media.probe(str(stored))
        except ClipDeskError:
            src.unlink(missing_ok=True)
            stored.unlink(missing_ok=True)
            raise

        try:
            size = stored.stat().st_size
        except OSError:
            size = int(size_bytes)

        record = FileRecord(
            id=file_id or src.stem,
            original_name=str(original_name or stored.name),
            stored_filename=stored.name,
            path=str(stored),
            size_bytes=size,
            media_kind=kind,
            probe_info=probe,
        )
        logger.info(
            "ingested %s (file_id=%s, name=%s, duration=%s)",
            kind.value,
            record.id,
            record.original_name,
            probe.duration,
        )
        return record
