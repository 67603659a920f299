"""Canonical error codes surfaced to API/UI."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_MEDIA = "INVALID_MEDIA"
    SIZE_LIMIT_EXCEEDED = "SIZE_LIMIT_EXCEEDED"

    TRANSFORM_FAILED = "TRANSFORM_FAILED"
    PROBE_FAILED = "PROBE_FAILED"
    TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"

    PROVIDER_FAILED = "PROVIDER_FAILED"
