"""FFmpeg-based media transforms."""

from __future__ import annotations

import json
import logging
import subprocess
import time
from pathlib import Path
from typing import Any, Sequence
from uuid import uuid4

from clipdesk.error_codes import ErrorCode
from clipdesk.exceptions import InvalidInputError, TransformError
from clipdesk.models.media import AudioStreamInfo, MediaKind, ProbeInfo, VideoStreamInfo
from clipdesk.models.segment import Segment
from clipdesk.providers.media.base import MediaProvider
from clipdesk.utils.ffmpeg import resolve_ffmpeg_bin, resolve_ffprobe_bin
from clipdesk.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)


def _fmt_seconds(value: float) -> str:
    return f"{float(value):.3f}"


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _escape_concat_path(path: str) -> str:
    return str(Path(path).resolve()).replace("'", "'\\''")


def parse_probe_output(payload: dict[str, Any]) -> ProbeInfo:
    """Map ffprobe `-show_format -show_streams` JSON to ProbeInfo."""
    fmt = dict(payload.get("format") or {})
    streams = [s for s in list(payload.get("streams") or []) if isinstance(s, dict)]
    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio_stream = next((s for s in streams if s.get("codec_type") == "audio"), None)

    video: VideoStreamInfo | None = None
    if video_stream is not None:
        width = video_stream.get("width")
        height = video_stream.get("height")
        video = VideoStreamInfo(
            codec=video_stream.get("codec_name"),
            resolution=f"{width}x{height}" if width and height else None,
            fps=video_stream.get("r_frame_rate"),
            bitrate=_to_int(video_stream.get("bit_rate")),
        )

    audio: AudioStreamInfo | None = None
    if audio_stream is not None:
        audio = AudioStreamInfo(
            codec=audio_stream.get("codec_name"),
            channels=_to_int(audio_stream.get("channels")),
            sample_rate=_to_int(audio_stream.get("sample_rate")),
            bitrate=_to_int(audio_stream.get("bit_rate")),
        )

    return ProbeInfo(
        duration=_to_float(fmt.get("duration")),
        format=fmt.get("format_name"),
        size=_to_int(fmt.get("size")),
        video=video,
        audio=audio,
    )


class FFmpegMediaProvider(MediaProvider):
    def __init__(
        self,
        *,
        ffmpeg_bin: str = "ffmpeg",
        ffprobe_bin: str = "ffprobe",
        work_dir: str | None = None,
        timeout_s: float | None = None,
        video_preset: str = "medium",
        video_crf: int = 23,
        join_fps: int = 30,
        join_sample_rate: int = 48000,
        join_channels: int = 2,
    ) -> None:
        self.ffmpeg_bin = resolve_ffmpeg_bin(ffmpeg_bin)
        self.ffprobe_bin = resolve_ffprobe_bin(ffprobe_bin)
        self.work_dir = Path(work_dir) if work_dir else None
        self.timeout_s = timeout_s
        self.video_preset = video_preset
        self.video_crf = int(video_crf)
        self.join_fps = int(join_fps)
        self.join_sample_rate = int(join_sample_rate)
        self.join_channels = int(join_channels)

    async def _run(self, args: list[str], *, engine: str = "ffmpeg") -> bytes:
        logger.debug("exec %s", " ".join(args))
        try:
            result = await run_subprocess(args, timeout_s=self.timeout_s)
        except FileNotFoundError as exc:
            raise TransformError(
                engine,
                f"binary not found: {args[0]}. Install ffmpeg and ensure it is in PATH "
                "(or set MEDIA_FFMPEG_BIN / MEDIA_FFPROBE_BIN).",
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise TransformError(engine, f"timed out after {self.timeout_s}s") from exc
        if not result.ok:
            stderr = result.stderr_text()
            logger.error("%s failed (code=%d): %s", engine, result.returncode, stderr)
            raise TransformError(engine, stderr or f"exited with code {result.returncode}")
        return result.stdout

    def _video_codec_args(self) -> list[str]:
        return ["-c:v", "libx264", "-preset", self.video_preset, "-crf", str(self.video_crf)]

    def _normalized_stream_args(self) -> list[str]:
        return [
            "-r",
            str(self.join_fps),
            "-vsync",
            "cfr",
            "-ar",
            str(self.join_sample_rate),
            "-ac",
            str(self.join_channels),
        ]

    @staticmethod
    def _prepare_output(output_path: str) -> str:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        return str(output_path)

    async def probe(self, path: str) -> ProbeInfo:
        stdout = await self._run(
            [
                self.ffprobe_bin,
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_format",
                "-show_streams",
                str(path),
            ],
            engine="ffprobe",
        )
        try:
            payload = json.loads(stdout.decode("utf-8", errors="ignore") or "{}")
        except json.JSONDecodeError as exc:
            raise TransformError(
                "ffprobe", f"unreadable probe output for {path}", error_code=ErrorCode.PROBE_FAILED
            ) from exc
        return parse_probe_output(payload)

    async def convert_container(self, path: str, kind: MediaKind) -> str:
        src = Path(path)
        target_suffix = kind.canonical_suffix
        if src.suffix.lower() == target_suffix:
            return str(src)

        output = src.with_suffix(target_suffix)
        if kind is MediaKind.VIDEO:
            codec_args = ["-c:v", "libx264", "-c:a", "aac", "-movflags", "+faststart"]
        else:
            codec_args = ["-vn", "-c:a", "libmp3lame", "-b:a", "192k", "-ar", "44100", "-ac", "2"]

        try:
            await self._run([self.ffmpeg_bin, "-y", "-i", str(src), *codec_args, str(output)])
        except TransformError:
            output.unlink(missing_ok=True)
            raise
        src.unlink(missing_ok=True)
        logger.info("converted %s -> %s", src.name, output.name)
        return str(output)

    async def extract_audio_track(self, path: str, output_path: str) -> str:
        """从视频提取音频，输出 16kHz 单声道 MP3"""
        output_path = self._prepare_output(output_path)
        await self._run(
            [
                self.ffmpeg_bin,
                "-y",
                "-i",
                str(path),
                "-vn",
                "-c:a",
                "libmp3lame",
                "-ac",
                "1",
                "-ar",
                "16000",
                "-b:a",
                "128k",
                "-sample_fmt",
                "s16p",
                output_path,
            ]
        )
        return output_path

    async def mute_segments(
        self, path: str, segments: Sequence[Segment], output_path: str
    ) -> str:
        output_path = self._prepare_output(output_path)
        if segments:
            ranges = "+".join(
                f"between(t,{_fmt_seconds(s.start)},{_fmt_seconds(s.end)})" for s in segments
            )
            audio_filter = f"[0:a]volume=enable='{ranges}':volume=0[outa]"
        else:
            audio_filter = "[0:a]acopy[outa]"

        await self._run(
            [
                self.ffmpeg_bin,
                "-y",
                "-i",
                str(path),
                "-filter_complex",
                audio_filter,
                "-map",
                "0:v?",
                "-map",
                "[outa]",
                "-c:v",
                "copy",
                "-c:a",
                "aac",
                "-movflags",
                "+faststart",
                output_path,
            ]
        )
        return output_path

    async def trim(
        self,
        path: str,
        segments: Sequence[Segment],
        join: bool,
        output_path: str,
        *,
        normalize: bool = False,
    ) -> str:
        segs = list(segments)
        extra = self._normalized_stream_args() if normalize else []

        if len(segs) == 1 and not join:
            seg = segs[0]
            output_path = self._prepare_output(output_path)
            await self._run(
                [
                    self.ffmpeg_bin,
                    "-y",
                    "-i",
                    str(path),
                    "-ss",
                    _fmt_seconds(seg.start),
                    "-t",
                    _fmt_seconds(seg.duration),
                    *self._video_codec_args(),
                    "-c:a",
                    "aac",
                    *extra,
                    "-movflags",
                    "+faststart",
                    output_path,
                ]
            )
            return output_path

        if join and len(segs) > 1:
            parts: list[str] = []
            concat_inputs = ""
            for i, seg in enumerate(segs):
                start, end = _fmt_seconds(seg.start), _fmt_seconds(seg.end)
                parts.append(f"[0:v]trim=start={start}:end={end},setpts=PTS-STARTPTS[v{i}]")
                parts.append(f"[0:a]atrim=start={start}:end={end},asetpts=PTS-STARTPTS[a{i}]")
                concat_inputs += f"[v{i}][a{i}]"
            parts.append(f"{concat_inputs}concat=n={len(segs)}:v=1:a=1[outv][outa]")

            output_path = self._prepare_output(output_path)
            await self._run(
                [
                    self.ffmpeg_bin,
                    "-y",
                    "-i",
                    str(path),
                    "-filter_complex",
                    ";".join(parts),
                    "-map",
                    "[outv]",
                    "-map",
                    "[outa]",
                    *self._video_codec_args(),
                    "-c:a",
                    "aac",
                    *extra,
                    "-movflags",
                    "+faststart",
                    output_path,
                ]
            )
            return output_path

        raise InvalidInputError(
            f"Invalid trim configuration: {len(segs)} segment(s) with join={bool(join)}"
        )

    def _concat_list_path(self, output_path: str) -> Path:
        base = self.work_dir or Path(output_path).parent
        base.mkdir(parents=True, exist_ok=True)
        return base / f"concat_list_{time.time_ns()}_{uuid4().hex[:8]}.txt"

    async def concatenate(
        self, paths: Sequence[str], output_path: str, *, reencode: bool
    ) -> str:
        inputs = [str(p) for p in paths]
        if not inputs:
            raise InvalidInputError("concatenate requires at least one input")

        output_path = self._prepare_output(output_path)
        list_path = self._concat_list_path(output_path)
        list_path.write_text(
            "".join(f"file '{_escape_concat_path(p)}'\n" for p in inputs), encoding="utf-8"
        )

        if reencode:
            codec_args = [
                *self._video_codec_args(),
                "-c:a",
                "aac",
                *self._normalized_stream_args(),
                "-af",
                "aresample=async=1",
            ]
            input_flags: list[str] = []
        else:
            codec_args = ["-c", "copy"]
            input_flags = ["-fflags", "+genpts"]

        try:
            await self._run(
                [
                    self.ffmpeg_bin,
                    "-y",
                    *input_flags,
                    "-f",
                    "concat",
                    "-safe",
                    "0",
                    "-i",
                    str(list_path),
                    *codec_args,
                    "-movflags",
                    "+faststart",
                    output_path,
                ]
            )
        finally:
            list_path.unlink(missing_ok=True)
        return output_path
