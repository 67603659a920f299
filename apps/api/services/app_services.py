"""Process-wide service graph held on `app.state.services`."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from clipdesk.config import Settings
from clipdesk.exceptions import ConfigurationError
from clipdesk.providers import get_media_provider, get_transcription_provider
from clipdesk.providers.asr.base import TranscriptionProvider
from clipdesk.providers.media.base import MediaProvider
from clipdesk.services import (
    CustomWordList,
    EditEngine,
    FileManager,
    InMemorySessionStore,
    MediaIngestService,
    TranscriptionService,
)

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    settings: Settings
    files: FileManager
    media: MediaProvider
    engine: EditEngine
    ingest: MediaIngestService
    transcription: TranscriptionService
    custom_words: CustomWordList

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        media: MediaProvider | None = None,
        transcription_provider: TranscriptionProvider | None = None,
    ) -> "AppServices":
        files = FileManager(settings.data_dir)
        files.ensure_dirs()

        if media is None:
            media = get_media_provider(settings.media.model_dump(), work_dir=str(files.temp_dir))
        if transcription_provider is None:
            try:
                transcription_provider = get_transcription_provider(settings.asr.model_dump())
            except ConfigurationError as exc:
                # Editing works without transcription; the endpoints report it per request.
                logger.warning("transcription disabled: %s", exc)

        engine = EditEngine(
            InMemorySessionStore(),
            media,
            files,
            max_concurrent_transforms=settings.media.max_concurrent_transforms,
        )
        return cls(
            settings=settings,
            files=files,
            media=media,
            engine=engine,
            ingest=MediaIngestService(media),
            transcription=TranscriptionService(
                media,
                transcription_provider,
                files,
                max_audio_bytes=settings.transcription.max_audio_bytes,
            ),
            custom_words=CustomWordList(),
        )

    async def close(self) -> None:
        await self.transcription.close()
        await self.media.close()
