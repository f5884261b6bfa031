from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from reading_analyzer.errors import JobFailed, JobTimeout
from reading_analyzer.services.transcriber import TranscriptionProvider
from reading_analyzer.types import JobHandle, StatusReport, TranscriptResult

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[object]]


@dataclass(frozen=True, slots=True)
class Polling:
    attempt: int


@dataclass(frozen=True, slots=True)
class Completed:
    result: TranscriptResult


@dataclass(frozen=True, slots=True)
class Failed:
    message: str


PollState = Polling | Completed | Failed


def advance(state: Polling, report: StatusReport) -> PollState:
    """Apply one status report to a polling state.

    Only ``completed`` and ``error`` are terminal; anything else, including
    statuses the provider may add later, keeps the job polling.
    """
    if report.status == "completed":
        return Completed(
            TranscriptResult(
                text=report.text or "",
                words=report.words if report.words is not None else (),
                duration_seconds=report.duration_seconds or 0.0,
            )
        )
    if report.status == "error":
        return Failed(report.error_message or "Transcription provider reported an error")
    return Polling(state.attempt + 1)


class JobPoller:
    def __init__(
        self,
        provider: TranscriptionProvider,
        *,
        poll_interval_seconds: float = 3.0,
        max_attempts: int = 100,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.poll_interval_seconds = poll_interval_seconds
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def resolve(self, handle: JobHandle) -> TranscriptResult:
        logger.info("Waiting for transcription %s", handle)
        state: PollState = Polling(0)

        while isinstance(state, Polling):
            if state.attempt >= self.max_attempts:
                logger.error("Transcription %s timed out after %s attempts", handle, state.attempt)
                raise JobTimeout(handle, state.attempt)

            if state.attempt > 0:
                await self._sleep(self.poll_interval_seconds)

            report = await self.provider.query_status(handle)
            logger.info("Polling attempt %s for %s: status=%s", state.attempt + 1, handle, report.status)
            state = advance(state, report)

        if isinstance(state, Failed):
            logger.error("Transcription %s failed: %s", handle, state.message)
            raise JobFailed(state.message)

        logger.info("Transcription %s completed with %s words", handle, len(state.result.words))
        return state.result
