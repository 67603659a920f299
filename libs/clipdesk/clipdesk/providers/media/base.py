"""Media transform provider abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from clipdesk.models.media import MediaKind, ProbeInfo
from clipdesk.models.segment import Segment


class MediaProvider(ABC):
    """Contract for the media engine.

    Every call blocks (from the caller's point of view) until the engine
    finishes. Failures raise `TransformError` and are never retried here; the
    caller owns cleanup of `output_path` on failure.
    """

    @abstractmethod
    async def probe(self, path: str) -> ProbeInfo:
        raise NotImplementedError

    @abstractmethod
    async def convert_container(self, path: str, kind: MediaKind) -> str:
        """Re-encode to the canonical container for `kind`; return the new path."""
        raise NotImplementedError

    @abstractmethod
    async def extract_audio_track(self, path: str, output_path: str) -> str:
        """Extract a mono 16 kHz speech track for transcription."""
        raise NotImplementedError

    @abstractmethod
    async def mute_segments(
        self, path: str, segments: Sequence[Segment], output_path: str
    ) -> str:
        """Silence audio inside each range; the video length is unchanged."""
        raise NotImplementedError

    @abstractmethod
    async def trim(
        self,
        path: str,
        segments: Sequence[Segment],
        join: bool,
        output_path: str,
        *,
        normalize: bool = False,
    ) -> str:
        """Extract one range, or (join=True) concatenate several in list order."""
        raise NotImplementedError

    @abstractmethod
    async def concatenate(
        self, paths: Sequence[str], output_path: str, *, reencode: bool
    ) -> str:
        """Join whole files end-to-end."""
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover
        return None
