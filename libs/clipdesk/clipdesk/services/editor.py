"""Session lifecycle and version history engine.

Every edit reads from a named source version ("original" or an earlier
version number), runs one media transform into a pending temp file and only
then commits: under the session lock the version counter is bumped, the
pending file is moved to its final name and the history entry is appended.
A transform that fails never reaches the commit, so no version is recorded
and the pending file is removed with the rest of the request's temp files.

Version numbers therefore follow completion order, not request order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any
from uuid import uuid4

from clipdesk.exceptions import InvalidInputError, NotFoundError, TransformError
from clipdesk.models.media import FileRecord
from clipdesk.models.segment import Segment, normalize_segments
from clipdesk.models.session import (
    ORIGINAL,
    EditEntry,
    EditResult,
    HistoryView,
    OperationType,
    Session,
    VideoSegments,
)
from clipdesk.providers.media.base import MediaProvider
from clipdesk.services.file_manager import FileManager
from clipdesk.services.session_store import SessionStore

logger = logging.getLogger(__name__)

_SINGLE_FILE_OPERATIONS = frozenset(
    {OperationType.AUDIO_REMOVAL, OperationType.TRIM, OperationType.PROFANITY_FILTER}
)


def parse_source_version(value: str | int | None) -> int:
    """Return 0 for the original upload, otherwise the referenced version."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise InvalidInputError(f"invalid sourceVersion: {value!r}")
    if isinstance(value, int):
        version = value
    else:
        raw = str(value).strip()
        if raw.lower() == ORIGINAL:
            return 0
        try:
            version = int(raw)
        except ValueError as exc:
            raise InvalidInputError(f"invalid sourceVersion: {value!r}") from exc
    if version < 0:
        raise InvalidInputError(f"invalid sourceVersion: {value!r}")
    return version


def _source_label(version: int) -> str:
    return ORIGINAL if version == 0 else str(version)


class EditEngine:
    def __init__(
        self,
        store: SessionStore,
        media: MediaProvider,
        files: FileManager,
        *,
        max_concurrent_transforms: int = 4,
    ) -> None:
        self.store = store
        self.media = media
        self.files = files
        self.max_concurrent_transforms = max(1, int(max_concurrent_transforms))
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def _get_locked(self, session_id: str) -> Session:
        """Fetch a session while holding its lock; drop the lock if it is gone."""
        session = await self.store.get(session_id)
        if session is None:
            self._locks.pop(session_id, None)
            raise NotFoundError("session", session_id)
        return session

    # --- sessions -----------------------------------------------------------

    async def create_session(self) -> Session:
        session = Session(id=str(uuid4()))
        await self.store.put(session)
        logger.info("session created (session_id=%s)", session.id)
        return session

    async def get_session(self, session_id: str) -> Session:
        session = await self.store.get(str(session_id or ""))
        if session is None:
            raise NotFoundError("session", session_id)
        return session

    async def add_file(self, session_id: str, record: FileRecord) -> Session:
        await self.get_session(session_id)
        async with self._lock(session_id):
            session = await self._get_locked(session_id)
            if session.find_file(record.id) is None:
                session.videos.append(record)
                await self.store.put(session)
        logger.info(
            "%s added to session (session_id=%s, file_id=%s)",
            record.media_kind.value,
            session_id,
            record.id,
        )
        return session

    async def find_file(self, session_id: str, file_id: str) -> FileRecord:
        session = await self.get_session(session_id)
        record = session.find_file(str(file_id or ""))
        if record is None:
            raise NotFoundError("file", file_id)
        return record

    async def get_history(self, session_id: str) -> HistoryView:
        session = await self.get_session(session_id)
        return HistoryView(
            session=session,
            history=list(session.history),
            available_versions=session.available_versions,
        )

    async def delete_session(self, session_id: str) -> int:
        """Drop the session and best-effort delete every file it owns."""
        await self.get_session(session_id)
        async with self._lock(session_id):
            session = await self._get_locked(session_id)
            await self.store.delete(session.id)
        self._locks.pop(session.id, None)
        removed = self.files.delete_session_files(session)
        logger.info("session deleted (session_id=%s, files_removed=%d)", session.id, removed)
        return removed

    async def reset(self) -> None:
        """Forget every session and wipe all storage areas."""
        for session_id in await self.store.list_ids():
            await self.store.delete(session_id)
        self._locks.clear()
        self.files.reset()
        logger.info("storage reset")

    # --- version resolution -------------------------------------------------

    async def resolve_source_path(
        self,
        session_id: str,
        source_version: str | int | None,
        *,
        file_id: str | None = None,
    ) -> Path:
        session = await self.get_session(session_id)
        return self._resolve(session, parse_source_version(source_version), file_id)

    def _resolve(self, session: Session, version: int, file_id: str | None) -> Path:
        if version == 0:
            record = session.find_file(str(file_id or ""))
            if record is None:
                raise NotFoundError("file", file_id)
            return self.files.uploads_dir / record.stored_filename
        entry = session.find_version(version)
        if entry is None:
            raise NotFoundError("version", version)
        return self.files.processed_path(entry.output_filename)

    async def _source_duration(
        self, session: Session, version: int, file_id: str | None, path: Path
    ) -> float | None:
        if version == 0:
            record = session.find_file(str(file_id or ""))
            return record.duration if record is not None else None
        return (await self.media.probe(str(path))).duration

    # --- commit -------------------------------------------------------------

    async def _commit(
        self,
        session_id: str,
        pending: Path,
        filename_for: Callable[[int], str],
        entry_for: Callable[[int, str], EditEntry],
    ) -> EditResult:
        async with self._lock(session_id):
            # NotFound here means the session was deleted while the transform ran.
            session = await self._get_locked(session_id)
            version = session.current_version + 1
            filename = filename_for(version)
            try:
                self.files.promote(pending, filename)
            except OSError as exc:
                raise TransformError("storage", f"failed to store {filename}: {exc}") from exc
            session.current_version = version
            session.history.append(entry_for(version, filename))
            await self.store.put(session)
        return EditResult(version=version, output_filename=filename)

    # --- edits --------------------------------------------------------------

    async def apply_edit(
        self,
        session_id: str,
        operation: OperationType,
        *,
        file_id: str,
        segments: Sequence[Segment | Mapping[str, Any]] | None,
        source_version: str | int | None = ORIGINAL,
        join_segments: bool = False,
    ) -> EditResult:
        """Apply a single-file edit and record it as the next version.

        Raises:
            NotFoundError: Unknown session, file or source version.
            InvalidInputError: Bad segment list or trim configuration.
            TransformError: The media engine failed; nothing is recorded.
        """
        if operation not in _SINGLE_FILE_OPERATIONS:
            raise InvalidInputError(f"{operation.value} is not a single-file operation")

        session = await self.get_session(session_id)
        version = parse_source_version(source_version)
        record = session.find_file(str(file_id or ""))
        if record is None:
            raise NotFoundError("file", file_id)
        source = self._resolve(session, version, record.id)
        # Derived outputs keep the id of the upload they descend from.
        owner_id = record.id
        if version:
            owner_id = session.find_version(version).file_id or record.id
        duration = await self._source_duration(session, version, record.id, source)
        segs = normalize_segments(
            segments,
            duration=duration,
            preserve_order=operation is OperationType.TRIM,
        )
        # A de-duplicated join of one range is a plain extraction.
        join = bool(join_segments) and len(segs) > 1
        if operation is OperationType.TRIM and len(segs) > 1 and not join:
            raise InvalidInputError(
                f"Invalid trim configuration: {len(segs)} segments require joinSegments=true"
            )

        logger.info(
            "%s start (session_id=%s, file_id=%s, source=%s, segments=%d)",
            operation.value,
            session_id,
            owner_id,
            _source_label(version),
            len(segs),
        )
        with self.files.temp_files() as tmp:
            pending = tmp.new(f"pending_{owner_id}_{operation.value}", ".mp4")
            if operation is OperationType.TRIM:
                await self.media.trim(str(source), segs, join, str(pending))
            else:
                await self.media.mute_segments(str(source), segs, str(pending))

            result = await self._commit(
                session.id,
                pending,
                lambda v: self.files.version_filename(owner_id, v, operation),
                lambda v, name: EditEntry(
                    version=v,
                    operation_type=operation,
                    output_filename=name,
                    source_version=_source_label(version),
                    file_id=owner_id,
                    segments=tuple(segs),
                    join_segments=join if operation is OperationType.TRIM else None,
                ),
            )
        logger.info(
            "%s ok (session_id=%s, version=%d, output=%s)",
            operation.value,
            session_id,
            result.version,
            result.output_filename,
        )
        return result

    def _parse_video_segments(
        self,
        session: Session,
        video_segments: Sequence[VideoSegments | Mapping[str, Any]] | None,
    ) -> list[tuple[FileRecord, VideoSegments]]:
        items = list(video_segments or [])
        if not items:
            raise InvalidInputError("No video segments provided")

        out: list[tuple[FileRecord, VideoSegments]] = []
        for i, item in enumerate(items):
            if isinstance(item, VideoSegments):
                video_id, raw_segments = item.video_id, list(item.segments)
            elif isinstance(item, Mapping):
                video_id = str(item.get("videoId") or item.get("video_id") or "")
                raw_segments = item.get("segments")
            else:
                raise InvalidInputError(f"videoSegments[{i}] must be an object")
            if not video_id or not isinstance(raw_segments, (list, tuple)) or not raw_segments:
                raise InvalidInputError(
                    "Malformed videoSegments: each entry must have videoId and non-empty segments"
                )
            record = session.find_file(video_id)
            if record is None:
                raise NotFoundError("file", video_id)
            segs = normalize_segments(raw_segments, duration=record.duration, preserve_order=True)
            out.append((record, VideoSegments(video_id=video_id, segments=tuple(segs))))
        return out

    async def multi_trim_join(
        self,
        session_id: str,
        video_segments: Sequence[VideoSegments | Mapping[str, Any]] | None,
        *,
        output_name: str | None = None,
    ) -> EditResult:
        """Cut ranges from several uploads and join them into one new version.

        Every range is re-encoded to a common frame rate and audio layout
        before the re-encoding concat, so heterogeneous sources stay in sync.
        If any cut fails, no version is recorded.
        """
        session = await self.get_session(session_id)
        plan = self._parse_video_segments(session, video_segments)
        semaphore = asyncio.Semaphore(self.max_concurrent_transforms)
        logger.info(
            "multi_trim_join start (session_id=%s, videos=%d, pieces=%d)",
            session_id,
            len(plan),
            sum(len(vs.segments) for _, vs in plan),
        )

        with self.files.temp_files() as tmp:
            jobs: list[tuple[FileRecord, Segment, Path]] = []
            for vi, (record, vs) in enumerate(plan):
                for si, seg in enumerate(vs.segments):
                    jobs.append((record, seg, tmp.new(f"trimmed_{vi}_{si}", ".mp4")))

            async def _cut(record: FileRecord, seg: Segment, out: Path) -> str:
                async with semaphore:
                    return await self.media.trim(
                        record.path, [seg], False, str(out), normalize=True
                    )

            results = await asyncio.gather(
                *[_cut(r, s, o) for r, s, o in jobs], return_exceptions=True
            )
            for res in results:
                if isinstance(res, BaseException):
                    logger.error("multi_trim_join cut failed (session_id=%s): %s", session_id, res)
                    raise res

            pending = tmp.new("pending_multi_join", ".mp4")
            await self.media.concatenate([str(o) for _, _, o in jobs], str(pending), reencode=True)

            result = await self._commit(
                session.id,
                pending,
                lambda v: self.files.joined_filename(output_name, v),
                lambda v, name: EditEntry(
                    version=v,
                    operation_type=OperationType.MULTI_TRIM_JOIN,
                    output_filename=name,
                    source_version=ORIGINAL,
                    video_segments=tuple(vs for _, vs in plan),
                ),
            )
        logger.info(
            "multi_trim_join ok (session_id=%s, version=%d, output=%s)",
            session_id,
            result.version,
            result.output_filename,
        )
        return result

    async def merge_files(
        self,
        session_id: str,
        file_ids: Sequence[str],
        *,
        output_name: str | None = None,
    ) -> str:
        """Stream-copy whole uploads end-to-end (no version is recorded)."""
        ids = [str(x) for x in list(file_ids or [])]
        if len(ids) < 2:
            raise InvalidInputError("Provide at least two files to merge.")

        session = await self.get_session(session_id)
        records: list[FileRecord] = []
        for file_id in ids:
            record = session.find_file(file_id)
            if record is None:
                raise NotFoundError("file", file_id)
            records.append(record)

        filename = self.files.merged_filename(output_name)
        with self.files.temp_files() as tmp:
            pending = tmp.new("pending_merge", ".mp4")
            await self.media.concatenate([r.path for r in records], str(pending), reencode=False)
            async with self._lock(session.id):
                current = await self._get_locked(session.id)
                try:
                    self.files.promote(pending, filename)
                except OSError as exc:
                    raise TransformError("storage", f"failed to store {filename}: {exc}") from exc
                current.merged_outputs.append(filename)
                await self.store.put(current)
        logger.info("merge ok (session_id=%s, files=%d, output=%s)", session_id, len(ids), filename)
        return filename
