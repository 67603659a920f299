"""Logging initialization helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from clipdesk.config import LoggingSettings, Settings

_ROOT_LOGGER = "clipdesk"
_CONFIGURED_FLAG = "_clipdesk_configured"


def _build_handlers(cfg: LoggingSettings, log_dir: str, level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))
    handlers: list[logging.Handler] = []

    if cfg.console:
        handlers.append(logging.StreamHandler())

    if cfg.file:
        file_path = Path(str(cfg.file))
        if not file_path.is_absolute():
            file_path = Path(log_dir) / file_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=int(cfg.max_bytes),
                backupCount=int(cfg.backup_count),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings: Settings) -> None:
    """Configure the `clipdesk` logger tree once.

    The API app logs under `clipdesk.api`, so a single configuration covers
    both the library and the app while uvicorn keeps its own handlers.
    httpx request lines are demoted to WARNING; transcription polling would
    otherwise flood INFO.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    if getattr(logger, _CONFIGURED_FLAG, False):
        return

    level_name = str(settings.logging.level or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger.setLevel(level)
    logger.handlers = _build_handlers(settings.logging, settings.log_dir, level)
    logger.propagate = False
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    setattr(logger, _CONFIGURED_FLAG, True)
