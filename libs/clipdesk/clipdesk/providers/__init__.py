"""Provider abstractions for external services."""

from clipdesk.providers.registry import get_media_provider, get_transcription_provider

__all__ = ["get_media_provider", "get_transcription_provider"]
