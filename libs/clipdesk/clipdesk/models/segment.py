"""Time-range segments used by every edit operation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from clipdesk.exceptions import InvalidInputError


@dataclass(frozen=True)
class Segment:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict[str, float]:
        return {"start": float(self.start), "end": float(self.end)}


def _coerce_seconds(value: Any, *, field: str, index: int) -> float:
    # bool is an int subclass; `{"start": true}` is a malformed request, not 1.0s
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"segment[{index}].{field} must be a number (got {value!r})")
    seconds = float(value)
    if not math.isfinite(seconds):
        raise InvalidInputError(f"segment[{index}].{field} must be finite (got {value!r})")
    return seconds


def parse_segment(raw: Segment | Mapping[str, Any], *, index: int = 0) -> Segment:
    if isinstance(raw, Segment):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidInputError(f"segment[{index}] must be an object with start/end")
    start = _coerce_seconds(raw.get("start"), field="start", index=index)
    end = _coerce_seconds(raw.get("end"), field="end", index=index)
    return Segment(start=start, end=end)


def validate_segment(seg: Segment, *, duration: float | None = None, index: int = 0) -> None:
    if seg.start < 0:
        raise InvalidInputError(f"segment[{index}] start must be >= 0 (got {seg.start})")
    if seg.start >= seg.end:
        raise InvalidInputError(
            f"segment[{index}] start ({seg.start}) must be less than end ({seg.end})"
        )
    if duration is not None and seg.end > float(duration):
        raise InvalidInputError(
            f"segment[{index}] end ({seg.end}) exceeds source duration ({float(duration)})"
        )


def normalize_segments(
    raw: Iterable[Segment | Mapping[str, Any]] | None,
    *,
    duration: float | None = None,
    require_non_empty: bool = True,
    preserve_order: bool = False,
) -> list[Segment]:
    """Validate and canonicalize a client-supplied segment list.

    Exact duplicate (start, end) pairs collapse to their first occurrence.
    By default the result is sorted by start; `preserve_order=True` keeps the
    caller order, which join operations concatenate in.

    Raises:
        InvalidInputError: On an empty list (when required), non-numeric
            bounds, `start < 0`, `start >= end` or `end > duration`.
    """
    items = list(raw or [])
    if not items and require_non_empty:
        raise InvalidInputError("at least one segment is required")

    out: list[Segment] = []
    seen: set[tuple[float, float]] = set()
    for i, item in enumerate(items):
        seg = parse_segment(item, index=i)
        validate_segment(seg, duration=duration, index=i)
        key = (seg.start, seg.end)
        if key in seen:
            continue
        seen.add(key)
        out.append(seg)

    if not preserve_order:
        out.sort(key=lambda s: (s.start, s.end))
    return out


def serialize_segments(segs: Iterable[Segment]) -> list[dict[str, float]]:
    return [s.to_dict() for s in segs]
