"""Profanity span detection over a finished transcription."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from clipdesk.models.transcript import ProfanitySource, ProfanitySpan, Transcription

# Two spans closer than this on both edges are the same occurrence.
DEDUP_TOLERANCE_S = 0.1


def _normalize_word(value: object) -> str:
    return str(value or "").strip().lower()


def _is_duplicate(spans: list[ProfanitySpan], start: float, end: float) -> bool:
    for span in spans:
        if abs(span.start - start) < DEDUP_TOLERANCE_S and abs(span.end - end) < DEDUP_TOLERANCE_S:
            return True
    return False


def find_profanity(
    transcription: Transcription, custom_words: Iterable[str]
) -> list[ProfanitySpan]:
    """Merge provider-flagged spans with custom-list matches.

    Provider spans come first and are never dropped. A transcript word whose
    lowercased text is in `custom_words` adds a custom-list span unless an
    existing span already covers the same time range.
    """
    active = {_normalize_word(w) for w in custom_words}
    active.discard("")

    spans: list[ProfanitySpan] = [
        ProfanitySpan(
            word=flagged.word,
            start=float(flagged.start),
            end=float(flagged.end),
            confidence=1.0 if flagged.confidence is None else float(flagged.confidence),
            source=ProfanitySource.EXTERNAL_DETECTOR,
        )
        for flagged in transcription.flagged_profanity
    ]
    if not active:
        return spans

    for word in transcription.words:
        if _normalize_word(word.word) not in active:
            continue
        start, end = float(word.start_time), float(word.end_time)
        if _is_duplicate(spans, start, end):
            continue
        spans.append(
            ProfanitySpan(
                word=word.word,
                start=start,
                end=end,
                confidence=1.0 if word.confidence is None else float(word.confidence),
                source=ProfanitySource.CUSTOM_LIST,
            )
        )
    return spans


class CustomWordList:
    """Process-wide list of extra words to flag (lowercased, insertion order)."""

    def __init__(self, words: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._words: dict[str, None] = {}
        self.add(words)

    def add(self, words: Iterable[str]) -> list[str]:
        with self._lock:
            for word in words:
                normalized = _normalize_word(word)
                if normalized:
                    self._words.setdefault(normalized, None)
            return list(self._words)

    def remove(self, words: Iterable[str]) -> list[str]:
        with self._lock:
            for word in words:
                self._words.pop(_normalize_word(word), None)
            return list(self._words)

    def words(self) -> list[str]:
        with self._lock:
            return list(self._words)

    def union(self, extra: Iterable[str] | None) -> set[str]:
        """Active set for one request: this list plus per-request words."""
        merged = set(self.words())
        merged.update(w for w in (_normalize_word(x) for x in extra or ()) if w)
        return merged

    def __len__(self) -> int:
        return len(self.words())
