from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Sequence

import pytest

from clipdesk.config import Settings
from clipdesk.exceptions import TransformError
from clipdesk.models.media import FileRecord, MediaKind, ProbeInfo
from clipdesk.models.segment import Segment
from clipdesk.models.transcript import Transcription
from clipdesk.providers.asr.base import TranscriptionProvider
from clipdesk.providers.media.base import MediaProvider
from clipdesk.services.editor import EditEngine
from clipdesk.services.file_manager import FileManager
from clipdesk.services.session_store import InMemorySessionStore


class FakeMediaProvider(MediaProvider):
    """Writes small placeholder outputs and records every call."""

    def __init__(self, *, duration: float = 60.0) -> None:
        self.duration = duration
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_ops: set[str] = set()
        # fail only when one of these source paths is involved
        self.fail_paths: set[str] = set()
        self.delays: dict[str, float] = {}
        self.audio_bytes = 1024

    async def _step(self, op: str, output_path: str | None, **kwargs: Any) -> None:
        self.calls.append((op, dict(kwargs, output_path=output_path)))
        delay = self.delays.get(op)
        if delay:
            await asyncio.sleep(delay)
        sources = [str(kwargs.get("path") or "")] + [str(p) for p in kwargs.get("paths") or []]
        if op in self.fail_ops or any(s in self.fail_paths for s in sources):
            raise TransformError("ffmpeg", f"{op} failed")
        if output_path is not None:
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)
            Path(output_path).write_bytes(f"{op}\n".encode())

    def ops(self, name: str) -> list[dict[str, Any]]:
        return [kw for op, kw in self.calls if op == name]

    async def probe(self, path: str) -> ProbeInfo:
        self.calls.append(("probe", {"path": path}))
        if "probe" in self.fail_ops:
            raise TransformError("ffprobe", "probe failed")
        size = Path(path).stat().st_size
        return ProbeInfo(duration=self.duration, format="mov,mp4,m4a", size=size)

    async def convert_container(self, path: str, kind: MediaKind) -> str:
        src = Path(path)
        self.calls.append(("convert", {"path": path, "kind": kind}))
        if "convert" in self.fail_ops:
            raise TransformError("ffmpeg", "convert failed")
        target = src.with_suffix(kind.canonical_suffix)
        if target != src:
            src.rename(target)
        return str(target)

    async def extract_audio_track(self, path: str, output_path: str) -> str:
        await self._step("extract_audio", None, path=path)
        Path(output_path).write_bytes(b"\0" * self.audio_bytes)
        return output_path

    async def mute_segments(self, path: str, segments: Sequence[Segment], output_path: str) -> str:
        await self._step("mute", output_path, path=path, segments=list(segments))
        return output_path

    async def trim(
        self,
        path: str,
        segments: Sequence[Segment],
        join: bool,
        output_path: str,
        *,
        normalize: bool = False,
    ) -> str:
        await self._step(
            "trim", output_path, path=path, segments=list(segments), join=join, normalize=normalize
        )
        return output_path

    async def concatenate(self, paths: Sequence[str], output_path: str, *, reencode: bool) -> str:
        await self._step("concat", output_path, paths=list(paths), reencode=reencode)
        return output_path


class FakeTranscriptionProvider(TranscriptionProvider):
    def __init__(self, result: Transcription | None = None) -> None:
        self.result = result or Transcription(full_text="")
        self.seen_paths: list[str] = []
        self.seen_exists: list[bool] = []
        self.closed = False

    async def transcribe(self, audio_path: str) -> Transcription:
        self.seen_paths.append(audio_path)
        self.seen_exists.append(Path(audio_path).exists())
        return self.result

    async def close(self) -> None:
        self.closed = True


def make_record(
    files: FileManager,
    *,
    file_id: str = "vid1",
    duration: float = 60.0,
    kind: MediaKind = MediaKind.VIDEO,
) -> FileRecord:
    path = files.upload_path(file_id, kind.canonical_suffix)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"source")
    return FileRecord(
        id=file_id,
        original_name=f"{file_id}{kind.canonical_suffix}",
        stored_filename=path.name,
        path=str(path),
        size_bytes=6,
        media_kind=kind,
        probe_info=ProbeInfo(duration=duration, format="mov,mp4,m4a", size=6),
    )


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture()
def files(settings: Settings) -> FileManager:
    manager = FileManager(settings.data_dir)
    manager.ensure_dirs()
    return manager


@pytest.fixture()
def media() -> FakeMediaProvider:
    return FakeMediaProvider()


@pytest.fixture()
def engine(media: FakeMediaProvider, files: FileManager) -> EditEngine:
    return EditEngine(InMemorySessionStore(), media, files, max_concurrent_transforms=2)


@pytest.fixture()
def record_factory(files: FileManager):
    def _make(**kwargs: Any) -> FileRecord:
        return make_record(files, **kwargs)

    return _make


@pytest.fixture()
def asr() -> FakeTranscriptionProvider:
    return FakeTranscriptionProvider()
