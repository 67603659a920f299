"""ClipDesk exception hierarchy."""

from __future__ import annotations

from clipdesk.error_codes import ErrorCode


class ClipDeskError(Exception):
    """Base error for ClipDesk."""

    error_code: ErrorCode | str = ErrorCode.UNKNOWN

    def __init__(self, message: str = "", *, error_code: ErrorCode | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class ConfigurationError(ClipDeskError):
    """Raised when configuration is invalid."""


class NotFoundError(ClipDeskError):
    """Raised when a session, file or version reference does not exist."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidInputError(ClipDeskError):
    """Raised when request inputs (segments, fields, file types) are invalid."""

    error_code = ErrorCode.INVALID_INPUT


class SizeLimitExceededError(ClipDeskError):
    """Raised when a payload exceeds a configured size ceiling."""

    error_code = ErrorCode.SIZE_LIMIT_EXCEEDED

    def __init__(self, message: str, *, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(message)
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class TransformError(ClipDeskError):
    """Raised when the media engine reports a failure."""

    error_code = ErrorCode.TRANSFORM_FAILED

    def __init__(
        self,
        engine: str,
        message: str,
        *,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(f"{engine}: {message}", error_code=error_code)
        self.engine = engine
        self.message = message


class ProviderError(ClipDeskError):
    """Raised when an external transcription provider call fails."""

    error_code = ErrorCode.PROVIDER_FAILED

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(f"{provider}: {message}", error_code=error_code)
        self.provider = provider
        self.message = message
