import asyncio
import json

import httpx
import pytest

from reading_analyzer.errors import CompletionFailed
from reading_analyzer.services.diff import (
    OpenAIDiffProvider,
    extract_corrected_transcription,
    extract_feedback,
)
from reading_analyzer.services.prompts import build_reading_prompt

ANALYSIS = (
    "**Feedback**\nGood reading with one omission.\n\n"
    "**Corrected Transcription**\nThe [quick|omission] brown fox"
)


def _provider(handler) -> OpenAIDiffProvider:
    return OpenAIDiffProvider(api_key="sk-test", transport=httpx.MockTransport(handler))


def test_compare_returns_content_and_usage() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"role": "assistant", "content": ANALYSIS}}],
                "usage": {"total_tokens": 850},
            },
        )

    result = asyncio.run(_provider(handler).compare("The quick brown fox", "The brown fox"))

    assert result.diff_text == ANALYSIS
    assert result.usage_tokens == 850
    body = json.loads(seen[0].content)
    assert seen[0].headers["authorization"] == "Bearer sk-test"
    assert body["model"] == "gpt-4"
    assert body["max_tokens"] == 1000
    assert body["messages"][0]["role"] == "system"
    assert "The quick brown fox" in body["messages"][1]["content"]
    assert "The brown fox" in body["messages"][1]["content"]


def test_compare_missing_usage_counts_zero_tokens() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": ANALYSIS}}]})

    result = asyncio.run(_provider(handler).compare("a", "a"))
    assert result.usage_tokens == 0


def test_compare_empty_content_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": None}}]})

    with pytest.raises(CompletionFailed, match="empty"):
        asyncio.run(_provider(handler).compare("a", "b"))


def test_compare_http_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    with pytest.raises(CompletionFailed, match="429") as info:
        asyncio.run(_provider(handler).compare("a", "b"))
    assert info.value.kind == "completion_failed"


def test_extract_sections() -> None:
    assert extract_feedback(ANALYSIS) == "Good reading with one omission.\n\n"
    assert extract_corrected_transcription(ANALYSIS) == "The [quick|omission] brown fox"


def test_extract_sections_fallbacks() -> None:
    assert extract_feedback("free text") == "No feedback available."
    assert extract_corrected_transcription("free text") == "No transcription available."


def test_compare_malformed_usage_counts_zero_tokens() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "bad-count" in request.headers["authorization"]:
            usage: object = {"total_tokens": "n/a"}
        else:
            usage = ["not", "a", "dict"]
        return httpx.Response(200, json={"choices": [{"message": {"content": ANALYSIS}}], "usage": usage})

    transport = httpx.MockTransport(handler)
    bad_count = OpenAIDiffProvider(api_key="bad-count", transport=transport)
    bad_shape = OpenAIDiffProvider(api_key="bad-shape", transport=transport)

    assert asyncio.run(bad_count.compare("a", "a")).usage_tokens == 0
    assert asyncio.run(bad_shape.compare("a", "a")).usage_tokens == 0


def test_reading_prompt_keeps_strict_rules() -> None:
    prompt = build_reading_prompt("He played the piano beautifully", "He played the piano softly")

    assert "7. **Follow the Rules Strictly**" in prompt
    assert "For additions, ensure that the added word is not present in the original text." in prompt
    assert "(the second or subsequent occurrence)" in prompt
    assert "[softly|replacement|beautifully]" in prompt
    assert "must be exactly as it appears in the original text" in prompt
    assert "3. No extra commentary, no reasoning steps, just the result." in prompt
    assert prompt.count("He played the piano softly") == 2
