from __future__ import annotations

import logging

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from reading_analyzer.analyzer import ReadingAnalyzer
from reading_analyzer.config import Settings, load_settings
from reading_analyzer.routes import RouteRegistry
from reading_analyzer.services.diff import OpenAIDiffProvider
from reading_analyzer.services.poller import JobPoller
from reading_analyzer.services.scorer import AlignmentScorer
from reading_analyzer.services.transcriber import AssemblyAITranscriber

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger(__name__)


class AppRuntime:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.transcriber = AssemblyAITranscriber(
            api_key=settings.assemblyai_api_key,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self.poller = JobPoller(
            self.transcriber,
            poll_interval_seconds=settings.poll_interval_seconds,
            max_attempts=settings.max_poll_attempts,
        )
        self.diff_provider = OpenAIDiffProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self.scorer = AlignmentScorer()
        self.analyzer = ReadingAnalyzer(
            transcriber=self.transcriber,
            poller=self.poller,
            diff_provider=self.diff_provider,
            scorer=self.scorer,
            language_hint=settings.transcription_language,
        )


def create_app(runtime: AppRuntime) -> FastMCP:
    mcp = FastMCP(name="reading-analyzer")

    routes = RouteRegistry(
        runtime.analyzer,
        runtime.scorer,
        analyze_path=runtime.settings.analyze_path,
        max_upload_bytes=runtime.settings.max_upload_bytes,
    )
    routes.register(mcp)

    @mcp.custom_route(runtime.settings.health_path, methods=["GET"])
    async def health(_: Request) -> JSONResponse:
        return JSONResponse(
            {
                "ok": True,
                "analyze_path": runtime.settings.analyze_path,
                "mcp_path": runtime.settings.mcp_path,
                "transcription_language": runtime.settings.transcription_language,
            }
        )

    return mcp


def cli() -> None:
    settings = load_settings()
    runtime = AppRuntime(settings)

    app = create_app(runtime)
    logger.info(
        "Starting reading analyzer on %s:%s (analyze=%s, mcp=%s)",
        settings.host,
        settings.port,
        settings.analyze_path,
        settings.mcp_path,
    )
    app.run(
        transport="http",
        host=settings.host,
        port=settings.port,
        path=settings.mcp_path,
    )


if __name__ == "__main__":
    cli()
