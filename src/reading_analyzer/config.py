from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(slots=True)
class Settings:
    host: str
    port: int
    mcp_path: str
    analyze_path: str
    health_path: str
    assemblyai_api_key: str
    openai_api_key: str
    openai_model: str
    transcription_language: str
    poll_interval_seconds: float
    max_poll_attempts: int
    max_upload_bytes: int
    http_timeout_seconds: float


def _as_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _as_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


def _normalized_path(path: str) -> str:
    if not path.startswith("/"):
        path = f"/{path}"
    return path


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(f"{name} is required")
    return value


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int("PORT", 3000),
        mcp_path=_normalized_path(os.getenv("MCP_PATH", "/mcp")),
        analyze_path=_normalized_path(os.getenv("ANALYZE_PATH", "/analyze")),
        health_path=_normalized_path(os.getenv("HEALTH_PATH", "/healthz")),
        assemblyai_api_key=_required("ASSEMBLYAI_API_KEY"),
        openai_api_key=_required("OPENAI_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4"),
        transcription_language=os.getenv("TRANSCRIPTION_LANGUAGE", "tr"),
        poll_interval_seconds=_as_float("POLL_INTERVAL_SECONDS", 3.0),
        max_poll_attempts=_as_int("MAX_POLL_ATTEMPTS", 100),
        max_upload_bytes=_as_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        http_timeout_seconds=_as_float("HTTP_TIMEOUT_SECONDS", 120.0),
    )
