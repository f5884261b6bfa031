from __future__ import annotations

import logging
import re
from typing import Any, Protocol

import httpx

from reading_analyzer.errors import CompletionFailed
from reading_analyzer.services.prompts import SYSTEM_PROMPT, build_reading_prompt
from reading_analyzer.types import DiffResult

logger = logging.getLogger(__name__)

_FEEDBACK_RE = re.compile(r"\*\*Feedback\*\*\s*(.*?)\*\*Corrected Transcription\*\*", re.DOTALL)
_CORRECTED_RE = re.compile(r"\*\*Corrected Transcription\*\*\s*(.*)", re.DOTALL)


class SemanticDiffProvider(Protocol):
    async def compare(self, reference: str, transcribed: str) -> DiffResult: ...


class OpenAIDiffProvider:
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4",
        max_tokens: int = 1000,
        temperature: float = 0.7,
        timeout_seconds: float = 120.0,
        url: str = "https://api.openai.com/v1/chat/completions",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.url = url
        self._transport = transport

    async def compare(self, reference: str, transcribed: str) -> DiffResult:
        request_payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_reading_prompt(reference, transcribed)},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(self.url, headers=headers, json=request_payload)
        except httpx.HTTPError as exc:
            logger.error("OpenAI API transport error: %s", exc)
            raise CompletionFailed(f"OpenAI API call failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error("OpenAI API call failed (%s)", response.status_code)
            raise CompletionFailed(
                f"OpenAI API call failed ({response.status_code}): {response.text[:400]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise CompletionFailed("OpenAI API returned invalid JSON") from exc

        content = self._first_message_content(payload)
        if not content:
            logger.error("OpenAI response content is empty or null")
            raise CompletionFailed("OpenAI response content is empty.")

        return DiffResult(diff_text=content, usage_tokens=self._usage_tokens(payload))

    @staticmethod
    def _usage_tokens(payload: dict[str, Any]) -> int:
        usage = payload.get("usage")
        if not isinstance(usage, dict):
            return 0
        try:
            return int(usage.get("total_tokens") or 0)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed OpenAI usage: %r", usage)
            return 0

    @staticmethod
    def _first_message_content(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            return ""
        return str(message.get("content") or "")


def extract_feedback(diff_text: str) -> str:
    match = _FEEDBACK_RE.search(diff_text)
    return match.group(1) if match else "No feedback available."


def extract_corrected_transcription(diff_text: str) -> str:
    match = _CORRECTED_RE.search(diff_text)
    return match.group(1) if match else "No transcription available."
