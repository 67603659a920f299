"""Transcription provider implementations."""

from clipdesk.providers.asr.base import TranscriptionProvider

__all__ = ["TranscriptionProvider"]
