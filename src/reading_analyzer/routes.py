from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import JSONResponse

from reading_analyzer.analyzer import ReadingAnalyzer
from reading_analyzer.errors import ReadingAnalysisError, ValidationFailed
from reading_analyzer.services.scorer import AlignmentScorer

logger = logging.getLogger(__name__)

MP3_CONTENT_TYPES = frozenset({"audio/mpeg", "audio/mp3", "audio/mpeg3", "audio/x-mpeg-3"})


@dataclass(frozen=True, slots=True)
class AnalyzeRequest:
    audio_bytes: bytes
    mime_type: str
    text: str


def _is_mp3(filename: str | None, content_type: str | None) -> bool:
    if filename and filename.lower().endswith(".mp3"):
        return True
    return (content_type or "").split(";")[0].strip().lower() in MP3_CONTENT_TYPES


async def parse_analyze_request(request: Request, max_upload_bytes: int) -> AnalyzeRequest:
    errors: dict[str, list[str]] = {}
    try:
        form = await request.form()
    except Exception as exc:  # pylint: disable=broad-except
        raise ValidationFailed({"file": [f"Malformed form data: {exc}"]}) from exc

    upload = form.get("file")
    audio_bytes = b""
    mime_type = "audio/mpeg"
    if upload is None:
        errors["file"] = ["Audio file is required."]
    elif not isinstance(upload, UploadFile):
        errors["file"] = ["The uploaded file must be a valid file."]
    else:
        audio_bytes = await upload.read(max_upload_bytes + 1)
        mime_type = upload.content_type or mime_type
        if not _is_mp3(upload.filename, upload.content_type):
            errors.setdefault("file", []).append("Only mp3 file formats are allowed.")
        if len(audio_bytes) > max_upload_bytes:
            errors.setdefault("file", []).append(
                f"File size cannot exceed {max_upload_bytes // (1024 * 1024)}MB."
            )
        if not audio_bytes:
            errors.setdefault("file", []).append("The uploaded file must be a valid file.")

    text = form.get("text")
    if text is None or (isinstance(text, str) and not text.strip()):
        errors["text"] = ["Text input is required."]
    elif not isinstance(text, str):
        errors["text"] = ["Text input must be a valid string."]

    if errors:
        raise ValidationFailed(errors)
    return AnalyzeRequest(audio_bytes=audio_bytes, mime_type=mime_type, text=str(text))


class RouteRegistry:
    def __init__(
        self,
        analyzer: ReadingAnalyzer,
        scorer: AlignmentScorer,
        *,
        analyze_path: str = "/analyze",
        max_upload_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self.analyzer = analyzer
        self.scorer = scorer
        self.analyze_path = analyze_path
        self.max_upload_bytes = max_upload_bytes

    async def analyze(self, request: Request) -> JSONResponse:
        try:
            parsed = await parse_analyze_request(request, self.max_upload_bytes)
        except ValidationFailed as exc:
            logger.warning("Validation error: %s", exc.errors)
            return JSONResponse(
                {"error": "Validation error occurred", "details": exc.errors},
                status_code=422,
            )

        try:
            result = await self.analyzer.analyze(parsed.audio_bytes, parsed.mime_type, parsed.text)
        except ReadingAnalysisError as exc:
            logger.exception("Error during analyze process: %s", exc)
            return self._error_response(str(exc), exc.kind)
        except Exception as exc:  # pylint: disable=broad-except
            message = str(exc).strip() or "Unknown analysis error"
            logger.exception("Unexpected error during analyze process: %s", message)
            return self._error_response(message, ReadingAnalysisError.kind)

        return JSONResponse(result.to_dict())

    @staticmethod
    def _error_response(details: str, kind: str) -> JSONResponse:
        return JSONResponse(
            {
                "error": "An error occurred. Please check your file type and size.",
                "details": details,
                "kind": kind,
            },
            status_code=500,
        )

    def register(self, mcp: FastMCP) -> None:
        mcp.custom_route(self.analyze_path, methods=["POST"])(self.analyze)

        @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, idempotentHint=True))
        def score_reading(reference_text: str, transcribed_text: str) -> dict[str, Any]:
            """Score how accurately a transcription matches the text that was meant to be read.

            Args:
                reference_text: The text the reader was given
                transcribed_text: What the reader actually said

            Returns:
                Accuracy percentage with matched and per-side word counts.
            """
            return self.scorer.score(reference_text, transcribed_text).to_dict()
