from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Sequence

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from clipdesk.config import Settings
from clipdesk.exceptions import TransformError
from clipdesk.models.media import MediaKind, ProbeInfo, VideoStreamInfo
from clipdesk.models.segment import Segment
from clipdesk.models.transcript import (
    FlaggedWord,
    Transcription,
    TranscriptSegment,
    TranscriptWord,
)
from clipdesk.providers.asr.base import TranscriptionProvider
from clipdesk.providers.media.base import MediaProvider

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))


class FakeMedia(MediaProvider):
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_ops: set[str] = set()

    def _write(self, op: str, output_path: str, **kwargs: Any) -> str:
        self.calls.append((op, kwargs))
        if op in self.fail_ops:
            raise TransformError("ffmpeg", f"{op}: Conversion failed!")
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(f"{op}\n".encode())
        return output_path

    async def probe(self, path: str) -> ProbeInfo:
        return ProbeInfo(
            duration=30.0,
            format="mov,mp4,m4a",
            size=Path(path).stat().st_size,
            video=VideoStreamInfo(codec="h264", resolution="640x360", fps="30/1"),
        )

    async def convert_container(self, path: str, kind: MediaKind) -> str:
        src = Path(path)
        target = src.with_suffix(kind.canonical_suffix)
        if target != src:
            src.rename(target)
        return str(target)

    async def extract_audio_track(self, path: str, output_path: str) -> str:
        return self._write("extract_audio", output_path, path=path)

    async def mute_segments(self, path: str, segments: Sequence[Segment], output_path: str) -> str:
        return self._write("mute", output_path, path=path, segments=list(segments))

    async def trim(
        self,
        path: str,
        segments: Sequence[Segment],
        join: bool,
        output_path: str,
        *,
        normalize: bool = False,
    ) -> str:
        return self._write("trim", output_path, path=path, join=join, normalize=normalize)

    async def concatenate(self, paths: Sequence[str], output_path: str, *, reencode: bool) -> str:
        return self._write("concat", output_path, paths=list(paths), reencode=reencode)


class FakeASR(TranscriptionProvider):
    async def transcribe(self, audio_path: str) -> Transcription:
        return Transcription(
            full_text="oh darn it",
            words=[
                TranscriptWord("oh", 0.0, 0.2),
                TranscriptWord("darn", 0.3, 0.6),
                TranscriptWord("it", 0.7, 0.8),
                TranscriptWord("heck", 2.0, 2.3),
            ],
            segments=[TranscriptSegment(index=0, text="Oh darn it heck", speaker="A")],
            detected_language="en",
            language_confidence=0.93,
            flagged_profanity=[FlaggedWord("d***", 0.3, 0.6, confidence=0.88)],
        )


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture()
def media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture()
def app(settings: Settings, media: FakeMedia) -> FastAPI:
    from errors import register_exception_handlers
    from routes.downloads import router as downloads_router
    from routes.health import router as health_router
    from routes.processing import router as processing_router
    from routes.profanity import router as profanity_router
    from routes.sessions import router as sessions_router
    from routes.transcription import router as transcription_router
    from routes.uploads import router as uploads_router
    from services.app_services import AppServices

    test_app = FastAPI()
    test_app.state.settings = settings
    test_app.state.services = AppServices.from_settings(
        settings, media=media, transcription_provider=FakeASR()
    )
    register_exception_handlers(test_app)
    for router in (
        sessions_router,
        uploads_router,
        transcription_router,
        profanity_router,
        processing_router,
        downloads_router,
        health_router,
    ):
        test_app.include_router(router, prefix="/api")
    return test_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def session_id(client: TestClient) -> str:
    res = client.post("/api/session/create")
    assert res.status_code == 200
    return res.json()["sessionId"]


@pytest.fixture()
def upload(client: TestClient, session_id: str):
    def _upload(name: str = "clip.mov", content_type: str = "video/quicktime") -> dict:
        res = client.post(
            "/api/upload",
            files={"video": (name, b"fake media bytes", content_type)},
            data={"sessionId": session_id},
        )
        assert res.status_code == 200, res.text
        return res.json()["file"]

    return _upload
