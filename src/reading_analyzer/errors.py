from __future__ import annotations


class ReadingAnalysisError(RuntimeError):
    """Operational failure talking to a provider or driving a job."""

    kind = "analysis_failed"


class SubmissionFailed(ReadingAnalysisError):
    kind = "submission_failed"


class QueryFailed(ReadingAnalysisError):
    kind = "query_failed"


class JobFailed(ReadingAnalysisError):
    kind = "job_failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class JobTimeout(ReadingAnalysisError):
    kind = "job_timeout"

    def __init__(self, handle: str, attempts: int) -> None:
        super().__init__(f"Transcription {handle} did not finish after {attempts} status checks")
        self.handle = handle
        self.attempts = attempts


class CompletionFailed(ReadingAnalysisError):
    kind = "completion_failed"


class ValidationFailed(ValueError):
    """Client input rejected before any provider call is made."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__("Validation error occurred")
        self.errors = errors
