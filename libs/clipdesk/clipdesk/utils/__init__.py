"""Utility helpers."""

from clipdesk.utils.ffmpeg import resolve_ffmpeg_bin, resolve_ffprobe_bin
from clipdesk.utils.subprocess import RunResult, run_subprocess
from clipdesk.utils.word_alignment import align_segment_words

__all__ = [
    "RunResult",
    "align_segment_words",
    "resolve_ffmpeg_bin",
    "resolve_ffprobe_bin",
    "run_subprocess",
]
