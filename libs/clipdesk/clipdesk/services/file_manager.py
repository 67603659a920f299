"""Storage layout, naming and cleanup for uploaded/derived media."""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import uuid4

from clipdesk.exceptions import NotFoundError
from clipdesk.models.session import OperationType, Session

logger = logging.getLogger(__name__)

_OPERATION_SUFFIX: dict[OperationType, str] = {
    OperationType.AUDIO_REMOVAL: "audio_removed",
    OperationType.TRIM: "trimmed",
    OperationType.PROFANITY_FILTER: "profanity_muted",
}

OUTPUT_SUFFIX = ".mp4"


def safe_filename_base(value: str, *, default: str) -> str:
    cleaned = "".join(ch for ch in str(value or "") if ch.isalnum() or ch in {" ", "_", "-", "."})
    cleaned = "_".join(cleaned.strip().split())
    cleaned = cleaned.strip("._-")
    return cleaned[:80] or default


class TempFiles:
    """Unique temp paths that are removed when the owning block exits."""

    def __init__(self, manager: "FileManager") -> None:
        self._manager = manager
        self.paths: list[Path] = []

    def new(self, prefix: str, suffix: str) -> Path:
        path = self._manager.temp_path(prefix, suffix)
        self.paths.append(path)
        return path

    def track(self, path: str | Path) -> Path:
        p = Path(path)
        self.paths.append(p)
        return p


class FileManager:
    """Owns `{root}/uploads`, `{root}/processed` and `{root}/temp`.

    Upload ids are random tokens independent of the client filename. Derived
    filenames embed file id, version and operation for debuggability only;
    nothing parses them back.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.uploads_dir = self.root / "uploads"
        self.processed_dir = self.root / "processed"
        self.temp_dir = self.root / "temp"

    @property
    def areas(self) -> tuple[Path, Path, Path]:
        return (self.uploads_dir, self.processed_dir, self.temp_dir)

    def ensure_dirs(self) -> None:
        for d in self.areas:
            d.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_file_id() -> str:
        return uuid4().hex

    def upload_path(self, file_id: str, suffix: str) -> Path:
        return self.uploads_dir / f"{file_id}{suffix.lower()}"

    def processed_path(self, filename: str) -> Path:
        return self.processed_dir / filename

    def temp_path(self, prefix: str, suffix: str) -> Path:
        token = f"{time.time_ns()}_{uuid4().hex[:8]}"
        return self.temp_dir / f"{safe_filename_base(prefix, default='tmp')}_{token}{suffix}"

    @staticmethod
    def version_filename(file_id: str, version: int, operation: OperationType) -> str:
        suffix = _OPERATION_SUFFIX.get(operation, operation.value)
        base = safe_filename_base(file_id, default="file")
        return f"{base}_v{int(version)}_{suffix}{OUTPUT_SUFFIX}"

    @staticmethod
    def joined_filename(output_name: str | None, version: int) -> str:
        base = safe_filename_base(output_name or "", default="multi_video_joined")
        return f"{base}_v{int(version)}{OUTPUT_SUFFIX}"

    @staticmethod
    def merged_filename(output_name: str | None) -> str:
        base = safe_filename_base(Path(output_name or "").stem, default="merged_video")
        return f"{base}_{uuid4().hex[:8]}{OUTPUT_SUFFIX}"

    def promote(self, pending: str | Path, filename: str) -> Path:
        """Move a finished transform output to its final processed name."""
        target = self.processed_path(filename)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(pending), str(target))
        return target

    @contextmanager
    def temp_files(self) -> Iterator[TempFiles]:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        tmp = TempFiles(self)
        try:
            yield tmp
        finally:
            self.remove_quietly(tmp.paths)

    def remove_quietly(self, paths: Iterable[str | Path]) -> int:
        """Best-effort delete; returns how many files were removed."""
        removed = 0
        for raw in paths:
            path = Path(raw)
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("failed to remove %s: %s", path, exc)
        return removed

    def session_files(self, session: Session) -> list[Path]:
        files = [Path(record.path) for record in session.videos]
        files.extend(self.processed_path(e.output_filename) for e in session.history)
        files.extend(self.processed_path(name) for name in session.merged_outputs)
        return files

    def delete_session_files(self, session: Session) -> int:
        return self.remove_quietly(self.session_files(session))

    def reset(self) -> None:
        """Recursively wipe and recreate every storage area."""
        for d in self.areas:
            try:
                shutil.rmtree(d)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("failed to remove %s: %s", d, exc)
            d.mkdir(parents=True, exist_ok=True)

    def resolve_download(self, filename: str) -> Path:
        name = str(filename or "")
        if not name or os.path.basename(name) != name or name in {".", ".."}:
            raise NotFoundError("file", filename)
        path = self.processed_path(name)
        if not path.is_file():
            raise NotFoundError("file", filename)
        return path
