"""
FastAPI application for tgfeed.

This module exposes the feed pipeline over HTTP: one route turning a channel
handle into an RSS or Atom document, plus a health check.
"""
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from tgfeed import __version__
from tgfeed.config import Settings, load_settings
from tgfeed.context import AppContext
from tgfeed.exceptions import FetchError, FormatError, ValidationError
from tgfeed.models.params import FeedParams
from tgfeed.pipeline import FeedService

# Set up structured logger
logger = structlog.get_logger()


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def create_app(settings: Optional[Settings] = None, service: Optional[FeedService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings, loaded from the environment if omitted
        service: Prebuilt feed service; when given, no clients are created

    Returns:
        FastAPI: Configured application
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if service is not None:
            app.state.feed_service = service
            yield
            await service.drain()
            return

        app_context = AppContext(settings)
        try:
            await app_context.initialize()
            app.state.feed_service = app_context.feed_service
            logger.info("Feed service started")
            yield
        finally:
            await app_context.shutdown()

    app = FastAPI(
        title="tgfeed",
        description="RSS and Atom feeds for public Telegram channels",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()
        logger.info(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            query=request.url.query,
        )
        response = await call_next(request)
        logger.info(
            "HTTP response",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            bytes=response.headers.get("content-length"),
        )
        return response

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, exc)

    @app.exception_handler(FetchError)
    async def fetch_error_handler(request: Request, exc: FetchError):
        logger.warning("Channel fetch failed", path=request.url.path, url=exc.url, error=str(exc))
        return _error(502, exc)

    @app.exception_handler(FormatError)
    async def format_error_handler(request: Request, exc: FormatError):
        logger.error("Feed rendering failed", path=request.url.path, error=str(exc))
        return _error(500, exc)

    @app.get("/telegram/channel/{username}")
    async def channel_feed(
        request: Request,
        username: str,
        format: Optional[str] = None,
        exclude: Optional[str] = None,
        exclude_case_sensitive: Optional[str] = None,
        cache_ttl: Optional[str] = None,
    ):
        """Feed for a public channel."""
        params = FeedParams.from_query(
            username,
            format=format,
            exclude=exclude,
            exclude_case_sensitive=exclude_case_sensitive,
            cache_ttl=cache_ttl,
            default_cache_ttl=settings.cache.default_ttl_minutes,
        )
        feed = await request.app.state.feed_service.serve(params)
        return Response(content=feed.content, headers=feed.headers())

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc),
        }

    return app
