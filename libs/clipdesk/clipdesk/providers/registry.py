"""Provider factory and registry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from clipdesk.exceptions import ConfigurationError
from clipdesk.providers.asr.base import TranscriptionProvider
from clipdesk.providers.media.base import MediaProvider


def get_media_provider(config: Mapping[str, Any], *, work_dir: str | None = None) -> MediaProvider:
    """Get media transform provider based on configuration."""
    provider_type = str(config.get("provider", "ffmpeg")).strip().lower()

    match provider_type:
        case "ffmpeg" | "default":
            from clipdesk.providers.media.ffmpeg import FFmpegMediaProvider

            return FFmpegMediaProvider(
                ffmpeg_bin=str(config.get("ffmpeg_bin") or "ffmpeg"),
                ffprobe_bin=str(config.get("ffprobe_bin") or "ffprobe"),
                work_dir=work_dir,
                timeout_s=config.get("timeout_s"),
                video_preset=str(config.get("video_preset") or "medium"),
                video_crf=int(config.get("video_crf", 23)),
                join_fps=int(config.get("join_fps", 30)),
                join_sample_rate=int(config.get("join_sample_rate", 48000)),
                join_channels=int(config.get("join_channels", 2)),
            )
        case _:
            raise ConfigurationError(f"Unknown media provider: {provider_type}")


def get_transcription_provider(config: Mapping[str, Any]) -> TranscriptionProvider:
    """Get transcription provider based on configuration."""
    provider_type = str(config.get("provider", "assemblyai")).strip().lower()

    match provider_type:
        case "assemblyai":
            from clipdesk.providers.asr.assemblyai import AssemblyAIProvider

            api_key = str(config.get("api_key") or "").strip()
            if not api_key:
                raise ConfigurationError("AssemblyAI provider requires api_key (set ASR_API_KEY)")
            return AssemblyAIProvider(
                api_key=api_key,
                base_url=str(config.get("base_url") or "https://api.assemblyai.com/v2"),
                speech_model=str(config.get("speech_model") or "universal"),
                timeout=float(config.get("timeout", 300.0)),
                poll_interval_s=float(config.get("poll_interval_s", 3.0)),
                max_wait_s=float(config.get("max_wait_s", 3600.0)),
            )
        case _:
            raise ConfigurationError(f"Unknown ASR provider: {provider_type}")
