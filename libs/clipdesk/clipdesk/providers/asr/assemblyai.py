"""AssemblyAI transcription provider (REST API over httpx)."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from clipdesk.error_codes import ErrorCode
from clipdesk.exceptions import ProviderError
from clipdesk.models.transcript import (
    FlaggedWord,
    Transcription,
    TranscriptSegment,
    TranscriptWord,
)
from clipdesk.providers.asr.base import TranscriptionProvider

logger = logging.getLogger(__name__)

_PROVIDER = "assemblyai"


class _RetryableStatusError(ProviderError):
    """Status poll hit a 429, a 5xx or a transport error."""


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    wait_s = state.next_action.sleep if state.next_action else None
    logger.warning(
        "assemblyai status retrying (attempt=%s, wait_s=%s, error=%s)",
        state.attempt_number,
        wait_s,
        exc,
    )


def _ms_to_seconds(value: Any) -> float:
    try:
        return float(value) / 1000.0
    except (TypeError, ValueError):
        return 0.0


def _opt_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _speaker(value: Any) -> str | None:
    raw = str(value or "").strip()
    return raw or None


def parse_transcript_response(payload: dict[str, Any]) -> Transcription:
    """Convert a completed transcript payload into a Transcription.

    Provider timestamps are milliseconds; everything returned is seconds.
    """
    words: list[TranscriptWord] = []
    for item in list(payload.get("words") or []):
        if not isinstance(item, dict):
            continue
        words.append(
            TranscriptWord(
                word=str(item.get("text") or ""),
                start_time=_ms_to_seconds(item.get("start")),
                end_time=_ms_to_seconds(item.get("end")),
                confidence=_opt_float(item.get("confidence")),
                speaker=_speaker(item.get("speaker")),
            )
        )

    segments: list[TranscriptSegment] = []
    utterances = [u for u in list(payload.get("utterances") or []) if isinstance(u, dict)]
    for index, utt in enumerate(utterances):
        speaker = _speaker(utt.get("speaker"))
        segments.append(
            TranscriptSegment(
                index=index,
                text=str(utt.get("text") or ""),
                start=_ms_to_seconds(utt.get("start")),
                end=_ms_to_seconds(utt.get("end")),
                speaker=speaker or "Speaker_Unknown",
                confidence=_opt_float(utt.get("confidence")) or 0.0,
            )
        )
    if not segments:
        # Without utterances the whole transcript is one untimed segment; word
        # alignment fills start/end from the words it matches.
        segments.append(
            TranscriptSegment(
                index=0,
                text=str(payload.get("text") or ""),
                speaker="Unknown",
                confidence=_opt_float(payload.get("confidence")) or 0.0,
            )
        )

    flagged: list[FlaggedWord] = []
    for item in list(payload.get("filtered_words") or []):
        if not isinstance(item, dict):
            continue
        flagged.append(
            FlaggedWord(
                word=str(item.get("text") or ""),
                start=_ms_to_seconds(item.get("start")),
                end=_ms_to_seconds(item.get("end")),
                confidence=_opt_float(item.get("confidence")),
            )
        )

    return Transcription(
        full_text=str(payload.get("text") or ""),
        words=words,
        segments=segments,
        detected_language=str(payload.get("language_code") or "unknown"),
        language_confidence=_opt_float(payload.get("language_confidence")) or 0.0,
        flagged_profanity=flagged,
    )


class AssemblyAIProvider(TranscriptionProvider):
    """Upload → create transcript → poll until completed."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.assemblyai.com/v2",
        speech_model: str = "universal",
        timeout: float = 300.0,
        poll_interval_s: float = 3.0,
        max_wait_s: float = 3600.0,
    ):
        """Initialize the AssemblyAI provider.

        Args:
            api_key: AssemblyAI API key (sent as the `authorization` header)
            base_url: API base URL
            speech_model: Speech model name requested per transcript
            timeout: Per-request timeout in seconds
            poll_interval_s: Delay between status polls
            max_wait_s: Give up polling after this many seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.speech_model = speech_model
        self.timeout = timeout
        self.poll_interval_s = poll_interval_s
        self.max_wait_s = max_wait_s
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"authorization": self.api_key},
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    @staticmethod
    async def _iter_file(path: Path, chunk_size: int = 5 * 1024 * 1024) -> AsyncIterator[bytes]:
        with path.open("rb") as f:
            while True:
                chunk = await asyncio.to_thread(f.read, chunk_size)
                if not chunk:
                    break
                yield chunk

    async def _upload(self, client: httpx.AsyncClient, audio_path: str) -> str:
        response = await client.post(
            "/upload",
            content=self._iter_file(Path(audio_path)),
            headers={"content-type": "application/octet-stream"},
        )
        response.raise_for_status()
        upload_url = str(response.json().get("upload_url") or "")
        if not upload_url:
            raise ProviderError(_PROVIDER, "upload returned no upload_url")
        return upload_url

    async def _create(self, client: httpx.AsyncClient, upload_url: str) -> str:
        response = await client.post(
            "/transcript",
            json={
                "audio_url": upload_url,
                "speech_model": self.speech_model,
                "speaker_labels": True,
                "filter_profanity": True,
                "format_text": True,
                "punctuate": True,
                "language_detection": True,
            },
        )
        response.raise_for_status()
        transcript_id = str(response.json().get("id") or "")
        if not transcript_id:
            raise ProviderError(_PROVIDER, "transcript request returned no id")
        return transcript_id

    @retry(
        retry=retry_if_exception_type(_RetryableStatusError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        before_sleep=_log_retry,
        reraise=True,
    )
    async def _fetch_status(self, client: httpx.AsyncClient, transcript_id: str) -> dict[str, Any]:
        try:
            response = await client.get(f"/transcript/{transcript_id}")
        except httpx.TransportError as exc:
            raise _RetryableStatusError(_PROVIDER, str(exc)) from exc
        if response.status_code == 429 or response.status_code >= 500:
            raise _RetryableStatusError(
                _PROVIDER, f"status poll failed: HTTP {response.status_code}"
            )
        response.raise_for_status()
        return dict(response.json() or {})

    async def _poll(self, client: httpx.AsyncClient, transcript_id: str) -> dict[str, Any]:
        deadline = time.monotonic() + float(self.max_wait_s)
        while True:
            payload = await self._fetch_status(client, transcript_id)
            status = str(payload.get("status") or "")
            if status == "completed":
                return payload
            if status == "error":
                raise ProviderError(
                    _PROVIDER,
                    f"Transcription failed: {payload.get('error')}",
                    error_code=ErrorCode.TRANSCRIPTION_FAILED,
                )
            if time.monotonic() >= deadline:
                raise ProviderError(
                    _PROVIDER,
                    f"transcript {transcript_id} not completed after {self.max_wait_s}s",
                    error_code=ErrorCode.TRANSCRIPTION_FAILED,
                )
            await asyncio.sleep(self.poll_interval_s)

    async def transcribe(self, audio_path: str) -> Transcription:
        client = await self._get_client()
        try:
            upload_url = await self._upload(client, audio_path)
            transcript_id = await self._create(client, upload_url)
            logger.info("assemblyai transcript queued (id=%s)", transcript_id)
            payload = await self._poll(client, transcript_id)
        except httpx.HTTPError as exc:
            raise ProviderError(_PROVIDER, str(exc)) from exc

        transcription = parse_transcript_response(payload)
        logger.info(
            "transcription completed (id=%s, language=%s, words=%d)",
            transcript_id,
            transcription.detected_language,
            len(transcription.words),
        )
        return transcription

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AssemblyAIProvider":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()
