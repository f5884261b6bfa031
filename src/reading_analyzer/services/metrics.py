from __future__ import annotations

from collections.abc import Sequence

from reading_analyzer.types import WordTiming

TRANSCRIPTION_COST_PER_MINUTE = 0.0062
COMPLETION_COST_PER_1K_TOKENS = 0.03


def reading_speed(words: Sequence[WordTiming]) -> float:
    """Words per minute over the span from the first word's start to the last word's end."""
    if not words:
        return 0.0

    span_seconds = (words[-1].end_ms - words[0].start_ms) / 1000
    if span_seconds <= 0:
        return 0.0
    return round(len(words) / span_seconds * 60, 2)


def transcription_cost(duration_seconds: float) -> float:
    return round(duration_seconds / 60 * TRANSCRIPTION_COST_PER_MINUTE, 4)


def completion_cost(token_count: int) -> float:
    return round(token_count / 1000 * COMPLETION_COST_PER_1K_TOKENS, 4)
