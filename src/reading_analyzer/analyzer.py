from __future__ import annotations

import logging

from reading_analyzer.services.diff import (
    SemanticDiffProvider,
    extract_corrected_transcription,
    extract_feedback,
)
from reading_analyzer.services.metrics import completion_cost, reading_speed, transcription_cost
from reading_analyzer.services.poller import JobPoller
from reading_analyzer.services.scorer import AlignmentScorer
from reading_analyzer.services.transcriber import TranscriptionProvider
from reading_analyzer.types import ReadingAnalysis

logger = logging.getLogger(__name__)


class ReadingAnalyzer:
    def __init__(
        self,
        *,
        transcriber: TranscriptionProvider,
        poller: JobPoller,
        diff_provider: SemanticDiffProvider,
        scorer: AlignmentScorer,
        language_hint: str = "tr",
    ) -> None:
        self.transcriber = transcriber
        self.poller = poller
        self.diff_provider = diff_provider
        self.scorer = scorer
        self.language_hint = language_hint

    async def analyze(self, audio_bytes: bytes, mime_type: str, reference_text: str) -> ReadingAnalysis:
        logger.info("Analyze process started (%s bytes, %s)", len(audio_bytes), mime_type)

        handle = await self.transcriber.submit(audio_bytes, mime_type, self.language_hint)
        transcript = await self.poller.resolve(handle)

        accuracy = self.scorer.score(reference_text, transcript.text)
        logger.info("Accuracy calculated: %s", accuracy.percentage)

        diff = await self.diff_provider.compare(reference_text, transcript.text)

        analysis = ReadingAnalysis(
            transcript=transcript,
            accuracy=accuracy,
            reading_speed=reading_speed(transcript.words),
            analysis=diff.diff_text,
            feedback=extract_feedback(diff.diff_text),
            corrected_transcription=extract_corrected_transcription(diff.diff_text),
            costs={
                "assemblyAI": transcription_cost(transcript.duration_seconds),
                "openAI": completion_cost(diff.usage_tokens),
            },
        )
        logger.info("Analyze process completed for %s", handle)
        return analysis
