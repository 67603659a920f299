"""Store multipart uploads and register them with a session."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi import UploadFile

from clipdesk.error_codes import ErrorCode
from clipdesk.exceptions import ClipDeskError, InvalidInputError
from clipdesk.models.media import FileRecord, MediaKind
from clipdesk.services.ingest import ALLOWED_EXTENSIONS
from errors import UploadTooLargeError
from services.app_services import AppServices


def sanitize_filename(filename: str | None) -> str:
    raw = str(filename or "").strip()
    base = Path(raw).name
    base = base.replace("\x00", "")
    if not base:
        return "upload.bin"
    return base[:255]


def detect_content_type(filename: str, provided: str | None) -> str:
    candidate = str(provided or "").strip()
    if candidate and candidate != "application/octet-stream":
        return candidate
    guessed, _ = mimetypes.guess_type(filename)
    return str(guessed or "application/octet-stream")


async def write_upload_to_path(
    upload: UploadFile,
    target_path: Path,
    *,
    max_bytes: int,
    chunk_size: int = 8 * 1024 * 1024,
) -> int:
    target_path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with target_path.open("wb") as f:
            while True:
                chunk = await upload.read(chunk_size)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(
                        "file too large", size_bytes=written, limit_bytes=max_bytes
                    )
                f.write(chunk)
    except (ClipDeskError, OSError):
        target_path.unlink(missing_ok=True)
        raise
    return written


class UploadService:
    def __init__(self, services: AppServices) -> None:
        self.services = services

    async def store(
        self,
        session_id: str,
        upload: UploadFile,
        *,
        expected_kind: MediaKind | None = None,
    ) -> FileRecord:
        """Write, convert, probe and attach one upload to the session."""
        engine = self.services.engine
        await engine.get_session(session_id)

        safe_name = sanitize_filename(upload.filename)
        suffix = Path(safe_name).suffix.lower()
        if suffix not in ALLOWED_EXTENSIONS:
            raise InvalidInputError(
                f"Unsupported file type: {safe_name!r}. Only video and audio files are allowed.",
                error_code=ErrorCode.INVALID_MEDIA,
            )
        content_type = detect_content_type(safe_name, upload.content_type)

        files = self.services.files
        file_id = files.new_file_id()
        target = files.upload_path(file_id, suffix)
        try:
            size_bytes = await write_upload_to_path(
                upload, target, max_bytes=int(self.services.settings.upload_max_bytes)
            )
        finally:
            await upload.close()

        record = await self.services.ingest.ingest(
            target,
            safe_name,
            content_type,
            size_bytes,
            file_id=file_id,
            expected_kind=expected_kind,
        )
        try:
            await engine.add_file(session_id, record)
        except ClipDeskError:
            files.remove_quietly([record.path])
            raise
        return record
