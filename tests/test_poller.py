import asyncio

import pytest

from reading_analyzer.errors import JobFailed, JobTimeout, QueryFailed
from reading_analyzer.services.poller import Completed, Failed, JobPoller, Polling, advance
from reading_analyzer.types import StatusReport, WordTiming


class FakeClock:
    def __init__(self) -> None:
        self.elapsed = 0.0
        self.calls: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.elapsed += seconds


class ScriptedProvider:
    def __init__(self, reports: list[StatusReport], repeat_last: bool = False) -> None:
        self.reports = reports
        self.repeat_last = repeat_last
        self.queries: list[str] = []

    async def submit(self, audio_bytes: bytes, mime_type: str, language_hint: str) -> str:
        return "job-1"

    async def query_status(self, handle: str) -> StatusReport:
        self.queries.append(handle)
        index = len(self.queries) - 1
        if index >= len(self.reports) and self.repeat_last:
            return self.reports[-1]
        return self.reports[index]


WORDS = (
    WordTiming(text="The", start_ms=100, end_ms=400),
    WordTiming(text="brown", start_ms=450, end_ms=800),
    WordTiming(text="fox", start_ms=850, end_ms=1200),
)


def test_resolves_after_processing_reports() -> None:
    processing = StatusReport(status="processing")
    completed = StatusReport(status="completed", text="The brown fox", words=WORDS, duration_seconds=1.5)
    provider = ScriptedProvider([processing] * 4 + [completed])
    clock = FakeClock()

    result = asyncio.run(JobPoller(provider, sleep=clock.sleep).resolve("job-1"))

    assert len(provider.queries) == 5
    assert clock.elapsed == pytest.approx(12.0)
    assert clock.calls == [3.0, 3.0, 3.0, 3.0]
    assert result.text == "The brown fox"
    assert result.words == WORDS
    assert result.duration_seconds == 1.5


def test_times_out_after_attempt_budget() -> None:
    provider = ScriptedProvider([StatusReport(status="processing")], repeat_last=True)
    clock = FakeClock()

    with pytest.raises(JobTimeout) as info:
        asyncio.run(JobPoller(provider, sleep=clock.sleep).resolve("job-1"))

    assert len(provider.queries) == 100
    assert info.value.attempts == 100
    assert info.value.kind == "job_timeout"
    assert clock.calls == [3.0] * 99


def test_single_attempt_budget_never_waits() -> None:
    provider = ScriptedProvider([StatusReport(status="processing")], repeat_last=True)
    clock = FakeClock()

    with pytest.raises(JobTimeout) as info:
        asyncio.run(JobPoller(provider, max_attempts=1, sleep=clock.sleep).resolve("job-1"))

    assert len(provider.queries) == 1
    assert clock.calls == []
    assert info.value.attempts == 1


def test_error_status_fails_immediately() -> None:
    provider = ScriptedProvider([StatusReport(status="error", error_message="audio too short")])
    clock = FakeClock()

    with pytest.raises(JobFailed) as info:
        asyncio.run(JobPoller(provider, sleep=clock.sleep).resolve("job-1"))

    assert str(info.value) == "audio too short"
    assert info.value.message == "audio too short"
    assert len(provider.queries) == 1
    assert clock.calls == []


def test_unknown_status_keeps_polling() -> None:
    provider = ScriptedProvider(
        [
            StatusReport(status="queued"),
            StatusReport(status="warming_up"),
            StatusReport(status="completed", text="", words=(), duration_seconds=0.0),
        ]
    )
    clock = FakeClock()

    result = asyncio.run(JobPoller(provider, sleep=clock.sleep).resolve("job-1"))

    assert len(provider.queries) == 3
    assert result.words == ()


def test_query_failure_propagates() -> None:
    class BrokenProvider(ScriptedProvider):
        async def query_status(self, handle: str) -> StatusReport:
            self.queries.append(handle)
            raise QueryFailed("AssemblyAI transcript poll failed (502): bad gateway")

    provider = BrokenProvider([])
    with pytest.raises(QueryFailed):
        asyncio.run(JobPoller(provider, sleep=FakeClock().sleep).resolve("job-1"))
    assert len(provider.queries) == 1


def test_cancellation_stops_polling() -> None:
    provider = ScriptedProvider([StatusReport(status="processing")], repeat_last=True)

    async def scenario() -> None:
        waiting = asyncio.Event()

        async def blocking_sleep(_: float) -> None:
            waiting.set()
            await asyncio.Event().wait()

        task = asyncio.create_task(JobPoller(provider, sleep=blocking_sleep).resolve("job-1"))
        await waiting.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert len(provider.queries) == 1


def test_advance_transitions() -> None:
    assert advance(Polling(2), StatusReport(status="processing")) == Polling(3)
    assert advance(Polling(0), StatusReport(status="error")) == Failed(
        "Transcription provider reported an error"
    )

    completed = advance(Polling(0), StatusReport(status="completed", text="hi"))
    assert isinstance(completed, Completed)
    assert completed.result.words == ()
    assert completed.result.duration_seconds == 0.0
