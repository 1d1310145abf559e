"""FastAPI relay between capture clients and the upstream vision model.

Receives an encoded image and an optional prompt, forwards them to the
configured provider, and re-emits the model's text deltas as an event
stream::

    GET  /health       -> {"status": "ok", "provider": ..., "reachable": ...}
    POST /api/analyze  <- {"image": "<base64 or data URL>", "prompt": "..."}
                       -> data: {"text": "..."}\\n\\n ... data: [DONE]\\n\\n
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ValidationError

from visionsnap import __version__
from visionsnap.config.settings import DEFAULT_PROMPT, Settings
from visionsnap.domain.models import AnalyzeRequest
from visionsnap.interpreter import VisionProvider, create_provider
from visionsnap.relay.events import DONE_EVENT, encode_text_event
from visionsnap.utils.imaging import split_data_url

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class RelayStatus(BaseModel):
    status: str = "ok"
    provider: str
    model: str
    configured: bool
    reachable: bool


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(
    provider: VisionProvider | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the relay application.

    Args:
        provider: Upstream provider. Built from ``settings`` when omitted.
        settings: Application settings. Defaults are used when omitted.
    """
    settings = settings or Settings()
    default_prompt = settings.mllm.default_prompt or DEFAULT_PROMPT

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        p: VisionProvider = app.state.provider
        if not p.is_configured:
            logger.warning("No API key configured for provider %s", p.name)
        logger.info("Relay started (provider=%s, model=%s)", p.name, p.model)
        yield
        await p.aclose()
        logger.info("Relay stopped")

    app = FastAPI(
        title="visionsnap relay",
        description="Streams vision model descriptions of captured images",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.provider = provider or create_provider(settings)

    @app.get("/health")
    async def health_check() -> RelayStatus:
        p: VisionProvider = app.state.provider
        reachable = await p.health_check() if p.is_configured else False
        return RelayStatus(
            provider=p.name, model=p.model, configured=p.is_configured, reachable=reachable
        )

    @app.post(ANALYZE_PATH)
    async def analyze(request: Request):
        p: VisionProvider = app.state.provider

        try:
            body = AnalyzeRequest.model_validate(await request.json())
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.info("Rejected malformed analyze request: %s", e)
            return _error("Invalid request body", 400)

        if not body.image:
            return _error("No image provided", 400)

        if not p.is_configured:
            logger.error("Analyze request refused: API key not configured")
            return _error("API key not configured", 500)

        media_type, image_data = split_data_url(body.image)
        prompt = body.prompt or default_prompt
        logger.info(
            "Analyzing %s image (%d base64 chars, custom prompt=%s)",
            media_type, len(image_data), body.prompt is not None,
        )

        chunks = p.stream(image_data, media_type, prompt)
        # Pull the first delta before committing to a 200 so early upstream
        # failures can still be reported as a JSON error.
        try:
            first = await anext(chunks)
        except StopAsyncIteration:
            first = None
        except Exception as e:
            await chunks.aclose()
            logger.error("Error analyzing image: %s", e)
            return _error(str(e) or "Failed to analyze image", 500)

        return StreamingResponse(
            _relay_events(first, chunks),
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    return app


async def _relay_events(first: str | None, chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """Re-emit provider deltas as events, ending with the DONE frame.

    A failure mid-stream propagates so the response is aborted rather
    than closed cleanly.
    """
    try:
        if first is not None:
            yield encode_text_event(first)
        async for text in chunks:
            yield encode_text_event(text)
        yield DONE_EVENT
    except Exception:
        logger.exception("Upstream stream failed after the response started")
        raise
    finally:
        await chunks.aclose()


def main() -> None:
    """Entry point for running the relay standalone."""
    from visionsnap.config.settings import load_settings
    from visionsnap.utils.logging import setup_logging

    settings = load_settings()
    setup_logging(settings.logging)
    uvicorn.run(create_app(settings=settings), host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
