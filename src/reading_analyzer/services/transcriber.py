from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from reading_analyzer.errors import QueryFailed, SubmissionFailed
from reading_analyzer.types import JobHandle, StatusReport, WordTiming

logger = logging.getLogger(__name__)


class TranscriptionProvider(Protocol):
    async def submit(self, audio_bytes: bytes, mime_type: str, language_hint: str) -> JobHandle: ...

    async def query_status(self, handle: JobHandle) -> StatusReport: ...


class AssemblyAITranscriber:
    def __init__(
        self,
        api_key: str,
        timeout_seconds: float = 120.0,
        base_url: str = "https://api.assemblyai.com/v2",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            headers={"authorization": self.api_key},
            transport=self._transport,
        )

    async def submit(self, audio_bytes: bytes, mime_type: str, language_hint: str) -> JobHandle:
        try:
            async with self._client() as client:
                audio_url = await self._upload_audio(client, audio_bytes, mime_type)
                return await self._start_transcript(client, audio_url, language_hint)
        except httpx.HTTPError as exc:
            logger.error("AssemblyAI submission transport error: %s", exc)
            raise SubmissionFailed(f"AssemblyAI submission failed: {exc}") from exc

    async def query_status(self, handle: JobHandle) -> StatusReport:
        transcript_url = f"{self.base_url}/transcript/{handle}"
        try:
            async with self._client() as client:
                response = await client.get(transcript_url)
        except httpx.HTTPError as exc:
            logger.error("AssemblyAI poll transport error for %s: %s", handle, exc)
            raise QueryFailed(f"AssemblyAI transcript poll failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error("Polling failed for %s (%s)", handle, response.status_code)
            raise QueryFailed(
                f"AssemblyAI transcript poll failed ({response.status_code}): {response.text[:400]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise QueryFailed("AssemblyAI transcript poll returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise QueryFailed("AssemblyAI transcript poll returned an unexpected payload")
        return self._to_report(payload)

    async def _upload_audio(self, client: httpx.AsyncClient, audio_bytes: bytes, mime_type: str) -> str:
        upload_url = f"{self.base_url}/upload"
        response = await client.post(
            upload_url,
            headers={"content-type": mime_type},
            content=audio_bytes,
        )
        if response.status_code >= 400:
            logger.error("File upload failed (%s)", response.status_code)
            raise SubmissionFailed(
                f"AssemblyAI upload failed ({response.status_code}): {response.text[:400]}"
            )

        uploaded = self._json_field(response, "upload_url")
        if not uploaded:
            raise SubmissionFailed("AssemblyAI upload response missing upload_url")
        return str(uploaded)

    async def _start_transcript(self, client: httpx.AsyncClient, audio_url: str, language_hint: str) -> str:
        transcript_url = f"{self.base_url}/transcript"
        request_payload = {
            "audio_url": audio_url,
            "language_code": language_hint,
        }
        response = await client.post(transcript_url, json=request_payload)
        if response.status_code >= 400:
            logger.error("Failed to submit file for transcription (%s)", response.status_code)
            raise SubmissionFailed(
                f"AssemblyAI transcript create failed ({response.status_code}): {response.text[:400]}"
            )

        transcript_id = self._json_field(response, "id")
        if not transcript_id:
            raise SubmissionFailed("AssemblyAI transcript response missing id")
        return str(transcript_id)

    def _to_report(self, payload: dict[str, Any]) -> StatusReport:
        status = str(payload.get("status") or "").lower()
        words = payload.get("words")
        error = payload.get("error")
        text = payload.get("text")
        return StatusReport(
            status=status,
            text=str(text) if text is not None else None,
            words=self._extract_words(words) if isinstance(words, list) else None,
            duration_seconds=self._as_float(payload.get("audio_duration")),
            error_message=str(error) if error is not None else None,
        )

    def _extract_words(self, items: list[object]) -> tuple[WordTiming, ...]:
        words: list[WordTiming] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            words.append(
                WordTiming(
                    text=str(item.get("text") or ""),
                    start_ms=self._as_ms(item.get("start")),
                    end_ms=self._as_ms(item.get("end")),
                )
            )
        return tuple(words)

    @staticmethod
    def _json_field(response: httpx.Response, name: str) -> object:
        try:
            payload = response.json()
        except ValueError:
            return None
        return payload.get(name) if isinstance(payload, dict) else None

    @staticmethod
    def _as_ms(value: object) -> int:
        try:
            return int(float(str(value))) if value is not None else 0
        except (TypeError, ValueError):
            return 0

    @staticmethod
    def _as_float(value: object) -> float | None:
        try:
            return float(str(value)) if value is not None else None
        except (TypeError, ValueError):
            return None
