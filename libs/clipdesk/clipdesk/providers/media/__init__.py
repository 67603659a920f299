"""Media transform provider implementations."""

from clipdesk.providers.media.base import MediaProvider
from clipdesk.providers.media.ffmpeg import FFmpegMediaProvider

__all__ = ["MediaProvider", "FFmpegMediaProvider"]
