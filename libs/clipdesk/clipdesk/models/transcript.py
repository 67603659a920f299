"""Transcription results and profanity spans (all times in seconds)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProfanitySource(str, Enum):
    EXTERNAL_DETECTOR = "external-detector"
    CUSTOM_LIST = "custom-list"


@dataclass(frozen=True)
class TranscriptWord:
    word: str
    start_time: float
    end_time: float
    confidence: float | None = None
    speaker: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "startTime": float(self.start_time),
            "endTime": float(self.end_time),
            "confidence": self.confidence,
            "speaker": self.speaker,
        }


@dataclass
class TranscriptSegment:
    index: int
    text: str
    start: float | None = None
    end: float | None = None
    speaker: str | None = None
    confidence: float | None = None
    words: list[TranscriptWord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": int(self.index),
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "speaker": self.speaker,
            "confidence": self.confidence,
            "words": [
                {"word": w.word, "start": w.start_time, "end": w.end_time} for w in self.words
            ],
        }


@dataclass(frozen=True)
class FlaggedWord:
    """A span the transcription service itself flagged as profane."""

    word: str
    start: float
    end: float
    confidence: float | None = None


@dataclass
class Transcription:
    full_text: str
    words: list[TranscriptWord] = field(default_factory=list)
    segments: list[TranscriptSegment] = field(default_factory=list)
    detected_language: str = "unknown"
    language_confidence: float = 0.0
    flagged_profanity: list[FlaggedWord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fullText": self.full_text,
            "segments": [s.to_dict() for s in self.segments],
            "words": [w.to_dict() for w in self.words],
            "detectedLanguage": self.detected_language,
            "languageConfidence": float(self.language_confidence),
        }


@dataclass(frozen=True)
class ProfanitySpan:
    word: str
    start: float
    end: float
    confidence: float
    source: ProfanitySource

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "start": float(self.start),
            "end": float(self.end),
            "confidence": float(self.confidence),
            "source": self.source.value,
        }
