"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clipdesk.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]


def _resolve_repo_path(value: str) -> str:
    raw = str(value or "").strip()
    if not raw:
        return raw
    p = Path(raw)
    if p.is_absolute():
        return str(p)
    return str((_REPO_ROOT / p).resolve())


class MediaConfig(BaseSettings):
    """Media engine (ffmpeg) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "ffmpeg"
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    timeout_s: float | None = Field(default=None, gt=0)
    max_concurrent_transforms: int = Field(default=4, ge=1)

    # x264 output preset used for every re-encode
    video_preset: str = "medium"
    video_crf: int = Field(default=23, ge=0, le=51)

    # Normalized stream layout for multi-source joins
    join_fps: int = Field(default=30, ge=1)
    join_sample_rate: int = Field(default=48000, ge=8000)
    join_channels: int = Field(default=2, ge=1)


class ASRConfig(BaseSettings):
    """Transcription provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ASR_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "assemblyai"
    base_url: str = "https://api.assemblyai.com/v2"
    api_key: str = ""
    speech_model: str = "universal"
    timeout: float = 300.0  # per HTTP request, seconds
    poll_interval_s: float = Field(default=3.0, gt=0)
    max_wait_s: float = Field(default=3600.0, gt=0)


class TranscriptionConfig(BaseSettings):
    """Limits applied before audio is handed to the transcription provider."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIPTION_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_audio_bytes: int = Field(default=200 * 1024 * 1024, ge=1)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    data_dir: str = "./data"
    log_dir: str = "./logs"
    upload_max_bytes: int = Field(default=50 * 1024 * 1024 * 1024, ge=1)
    upload_max_files: int = Field(default=10, ge=1)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Media engine
    media: MediaConfig = MediaConfig()

    # Transcription
    asr: ASRConfig = ASRConfig()
    transcription: TranscriptionConfig = TranscriptionConfig()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        # Running apps with `--directory apps/*` changes CWD; keep paths stable.
        self.data_dir = _resolve_repo_path(self.data_dir)
        self.log_dir = _resolve_repo_path(self.log_dir)
        if not self.data_dir:
            raise ConfigurationError("DATA_DIR must not be empty")
        return self

    def model_post_init(self, __context: Any) -> None:
        for raw in (self.data_dir, self.log_dir):
            Path(raw).mkdir(parents=True, exist_ok=True)
