from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

JobStatus = Literal["queued", "processing", "completed", "error"]
JobHandle = str


@dataclass(frozen=True, slots=True)
class WordTiming:
    text: str
    start_ms: int
    end_ms: int


@dataclass(frozen=True, slots=True)
class TranscriptResult:
    text: str
    words: tuple[WordTiming, ...]
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class StatusReport:
    status: str
    text: str | None = None
    words: tuple[WordTiming, ...] | None = None
    duration_seconds: float | None = None
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class AccuracyResult:
    percentage: float
    matched_count: int
    reference_word_count: int
    transcribed_word_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "percentage": self.percentage,
            "matched_count": self.matched_count,
            "reference_word_count": self.reference_word_count,
            "transcribed_word_count": self.transcribed_word_count,
        }


@dataclass(frozen=True, slots=True)
class DiffResult:
    diff_text: str
    usage_tokens: int


@dataclass(frozen=True, slots=True)
class ReadingAnalysis:
    transcript: TranscriptResult
    accuracy: AccuracyResult
    reading_speed: float
    analysis: str
    feedback: str
    corrected_transcription: str
    costs: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcription": self.transcript.text,
            "analysis": self.analysis,
            "reading_speed": self.reading_speed,
            "feedback": self.feedback,
            "corrected_transcription": self.corrected_transcription,
            "accuracy": self.accuracy.percentage,
            "accuracy_details": self.accuracy.to_dict(),
            "cost": dict(self.costs),
        }
