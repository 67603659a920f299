"""Attach word timings to transcript segments."""

from __future__ import annotations

import string
from collections.abc import Sequence

from clipdesk.models.transcript import TranscriptSegment, TranscriptWord

_STRIP_CHARS = string.punctuation + "“”‘’…—–«»¿¡"


def _token(value: str) -> str:
    return str(value or "").strip().strip(_STRIP_CHARS).lower()


def _tokens(text: str) -> list[str]:
    return [t for t in (_token(part) for part in str(text or "").split()) if t]


def align_segment_words(
    segments: Sequence[TranscriptSegment],
    words: Sequence[TranscriptWord],
) -> list[TranscriptSegment]:
    """Greedy left-to-right alignment with a forward-only word cursor.

    For each segment the first unconsumed word equal to the segment's first
    token starts the run; following words are taken while they match the
    segment's tokens in order. Segments without timing inherit start/end from
    their aligned words. Segments that match nothing keep an empty word list.
    """
    word_tokens = [_token(w.word) for w in words]
    cursor = 0
    out: list[TranscriptSegment] = []

    for seg in segments:
        tokens = _tokens(seg.text)
        matched: list[TranscriptWord] = []
        if tokens:
            start_at = next(
                (i for i in range(cursor, len(words)) if word_tokens[i] == tokens[0]),
                None,
            )
            if start_at is not None:
                i, t = start_at, 0
                while i < len(words) and t < len(tokens) and word_tokens[i] == tokens[t]:
                    matched.append(words[i])
                    i += 1
                    t += 1
                cursor = i

        start, end = seg.start, seg.end
        if matched:
            if start is None:
                start = matched[0].start_time
            if end is None:
                end = matched[-1].end_time
        out.append(
            TranscriptSegment(
                index=seg.index,
                text=seg.text,
                start=start,
                end=end,
                speaker=seg.speaker,
                confidence=seg.confidence,
                words=matched,
            )
        )
    return out
