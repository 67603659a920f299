"""Transcribe uploads and flag profanity in them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from clipdesk.exceptions import ConfigurationError, SizeLimitExceededError
from clipdesk.models.media import FileRecord, MediaKind
from clipdesk.models.transcript import ProfanitySpan, Transcription
from clipdesk.providers.asr.base import TranscriptionProvider
from clipdesk.providers.media.base import MediaProvider
from clipdesk.services.file_manager import FileManager
from clipdesk.services.profanity import find_profanity
from clipdesk.utils.word_alignment import align_segment_words

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptionOutcome:
    transcription: Transcription
    audio_size_bytes: int

    @property
    def audio_size_mb(self) -> float:
        return round(self.audio_size_bytes / (1024 * 1024), 2)


@dataclass(frozen=True)
class ProfanityReport:
    spans: list[ProfanitySpan]
    transcription: Transcription
    audio_size_bytes: int

    @property
    def audio_size_mb(self) -> float:
        return round(self.audio_size_bytes / (1024 * 1024), 2)


class TranscriptionService:
    def __init__(
        self,
        media: MediaProvider,
        provider: TranscriptionProvider | None,
        files: FileManager,
        *,
        max_audio_bytes: int = 200 * 1024 * 1024,
    ) -> None:
        self.media = media
        self.provider = provider
        self.files = files
        self.max_audio_bytes = int(max_audio_bytes)

    async def transcribe_file(self, record: FileRecord) -> TranscriptionOutcome:
        """Transcribe one upload; video audio goes through a temp mp3.

        Raises:
            SizeLimitExceededError: Audio is larger than `max_audio_bytes`.
            ProviderError: The transcription provider failed.
        """
        if self.provider is None:
            raise ConfigurationError("transcription provider is not configured (set ASR_API_KEY)")

        with self.files.temp_files() as tmp:
            if record.media_kind is MediaKind.AUDIO:
                audio_path = Path(record.path)
            else:
                audio_path = tmp.new(f"audio_{record.id}", ".mp3")
                await self.media.extract_audio_track(record.path, str(audio_path))

            size = audio_path.stat().st_size
            if size > self.max_audio_bytes:
                raise SizeLimitExceededError(
                    f"Audio too large for transcription: {size / (1024 * 1024):.2f}MB "
                    f"(limit {self.max_audio_bytes / (1024 * 1024):.0f}MB)",
                    size_bytes=size,
                    limit_bytes=self.max_audio_bytes,
                )

            logger.info(
                "transcription start (file_id=%s, kind=%s, audio_bytes=%d)",
                record.id,
                record.media_kind.value,
                size,
            )
            transcription = await self.provider.transcribe(str(audio_path))

        transcription.segments = align_segment_words(transcription.segments, transcription.words)
        return TranscriptionOutcome(transcription=transcription, audio_size_bytes=size)

    async def detect_profanity(
        self, record: FileRecord, custom_words: Iterable[str]
    ) -> ProfanityReport:
        outcome = await self.transcribe_file(record)
        spans = find_profanity(outcome.transcription, custom_words)
        logger.info("profanity detected (file_id=%s, spans=%d)", record.id, len(spans))
        return ProfanityReport(
            spans=spans,
            transcription=outcome.transcription,
            audio_size_bytes=outcome.audio_size_bytes,
        )

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()
