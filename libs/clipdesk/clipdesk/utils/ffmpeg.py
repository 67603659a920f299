"""FFmpeg/ffprobe binary resolution helpers.

Prefer system binaries, fallback to the `imageio-ffmpeg` bundled ffmpeg.
The bundle ships no ffprobe; probing then relies on PATH.
"""

from __future__ import annotations

import logging
import shutil
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)


def _which(binary: str) -> str | None:
    if Path(binary).exists():
        return binary
    return shutil.which(binary)


@lru_cache(maxsize=8)
def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    ffmpeg_bin = (ffmpeg_bin or "ffmpeg").strip()
    found = _which(ffmpeg_bin)
    if found:
        return found

    try:
        import imageio_ffmpeg

        return str(imageio_ffmpeg.get_ffmpeg_exe())
    except Exception as exc:
        logger.warning("failed to resolve bundled ffmpeg (%s); fallback to %r", exc, ffmpeg_bin)
        return ffmpeg_bin


@lru_cache(maxsize=8)
def resolve_ffprobe_bin(ffprobe_bin: str = "ffprobe") -> str:
    ffprobe_bin = (ffprobe_bin or "ffprobe").strip()
    found = _which(ffprobe_bin)
    if found:
        return found
    logger.warning("ffprobe not found on PATH; fallback to %r", ffprobe_bin)
    return ffprobe_bin
