"""Transcription provider base class."""

from abc import ABC, abstractmethod

from clipdesk.models.transcript import Transcription


class TranscriptionProvider(ABC):
    """Abstract base class for transcription providers."""

    @abstractmethod
    async def transcribe(self, audio_path: str) -> Transcription:
        """Transcribe an audio file.

        Implementations convert provider timestamps to seconds before
        returning; nothing downstream sees provider units.

        Args:
            audio_path: Path to the audio file.

        Returns:
            Full transcript with word timings, speaker segments, detected
            language and provider-flagged profanity.
        """
        ...

    async def close(self) -> None:  # pragma: no cover
        return None
