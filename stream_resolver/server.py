from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import init_logging, settings
from .errors import MalformedInput, ResolutionCancelled, TitleSuggestionError
from .providers import ADAPTERS
from .resolver import Resolver
from .schemas import (
    ErrorResponse,
    HealthResponse,
    Outcome,
    TitleSuggestionRequest,
    TitleSuggestionResponse,
)
from .suggest import TitleSuggester

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.25
CLIENT_CLOSED_REQUEST = 499

app = FastAPI(
    title="Stream Resolver",
    version=__version__,
    description=(
        "Resolves a YouTube URL into direct media stream links through public "
        "Piped and Invidious mirrors."
    ),
)

_resolver: Optional[Resolver] = None
_suggester: Optional[TitleSuggester] = None


def get_resolver() -> Resolver:
    if _resolver is None:
        raise RuntimeError("Resolver not ready")
    return _resolver


def get_suggester() -> TitleSuggester:
    if _suggester is None:
        raise RuntimeError("TitleSuggester not ready")
    return _suggester


@app.on_event("startup")
async def _startup() -> None:
    global _resolver, _suggester
    init_logging()
    _resolver = Resolver(settings)
    _suggester = TitleSuggester(settings)


async def _watch_disconnect(request: Request, cancel_event: threading.Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected; abandoning resolution")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@app.get("/")
def root():
    return {"service": "Stream Resolver", "status": "running"}


@app.get("/healthz", response_model=HealthResponse, tags=["system"])
async def health(resolver: Resolver = Depends(get_resolver)) -> HealthResponse:
    cache = resolver.cache
    return HealthResponse(
        version=__version__,
        families=sorted(ADAPTERS),
        cache_enabled=cache is not None,
        cache_entries=len(cache) if cache is not None else 0,
    )


@app.get("/resolve", tags=["resolution"])
async def resolve(
    request: Request,
    url: Optional[str] = Query(None, description="YouTube video URL."),
    resolver: Resolver = Depends(get_resolver),
):
    cancel_event = threading.Event()
    loop = asyncio.get_running_loop()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        result = await loop.run_in_executor(None, resolver.resolve, url or "", cancel_event)
    except ResolutionCancelled:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    finally:
        cancel_event.set()
        watcher.cancel()

    if result.outcome is Outcome.UNAVAILABLE:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=result.to_payload(include_title=False),
        )
    return JSONResponse(content=result.to_payload())


@app.post(
    "/suggest-title",
    response_model=TitleSuggestionResponse,
    tags=["suggestions"],
)
async def suggest_title(
    body: TitleSuggestionRequest,
    suggester: TitleSuggester = Depends(get_suggester),
) -> TitleSuggestionResponse:
    loop = asyncio.get_running_loop()
    title = await loop.run_in_executor(None, suggester.suggest, body.url)
    return TitleSuggestionResponse(suggested_title=title)


@app.exception_handler(MalformedInput)
async def malformed_input_handler(_: Request, exc: MalformedInput):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=str(exc), code="malformed_input").model_dump(),
    )


@app.exception_handler(TitleSuggestionError)
async def title_suggestion_error_handler(_: Request, exc: TitleSuggestionError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=ErrorResponse(error=str(exc), code="suggestion_failed").model_dump(),
    )


def run() -> None:
    """Convenience entry point."""
    init_logging()
    uvicorn.run(
        "stream_resolver.server:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
        workers=1,
    )


if __name__ == "__main__":
    run()
