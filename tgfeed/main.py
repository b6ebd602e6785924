#!/usr/bin/env python3
"""
Command line entry point for the tgfeed server.

Reads settings, applies command line overrides, configures logging and hands
the FastAPI application to uvicorn. Shared clients are opened and closed in
the application's lifespan, not here.
"""
import argparse
import logging
import sys
from typing import List, Optional

import structlog
import uvicorn

from tgfeed.config import LogLevel, Settings, load_settings
from tgfeed.web.app import create_app

logger = structlog.get_logger()


def _renderer(settings: Settings):
    if settings.logging.structured_logging:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(settings: Settings) -> None:
    """Configure structlog and the stdlib root logger from settings."""
    level_name = settings.logging.log_level.value

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(settings),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # structlog emits through stdlib logging, which needs a handler
    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))

    logger.info("Logging initialized", level=level_name)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments. Unset options leave settings untouched."""
    parser = argparse.ArgumentParser(
        prog="tgfeed",
        description="Serve RSS and Atom feeds for public Telegram channels",
    )
    parser.add_argument("--host", default=None, help="Address to bind the server to")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=[level.value for level in LogLevel],
        help="Override the configured log level",
    )
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Copy command line overrides onto loaded settings."""
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.log_level:
        settings.logging.log_level = LogLevel(args.log_level)
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Run the server; returns a process exit code."""
    try:
        args = parse_args(argv)
        settings = apply_overrides(load_settings(), args)
        setup_logging(settings)

        logger.info(
            "Starting tgfeed",
            version=settings.version,
            environment=settings.environment.value,
            host=settings.server.host,
            port=settings.server.port,
            cache_enabled=settings.cache.enabled,
            cache_backend=settings.cache.backend.value,
        )

        uvicorn.run(
            create_app(settings),
            host=settings.server.host,
            port=settings.server.port,
            log_level=settings.logging.log_level.value.lower(),
            access_log=False,
        )
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Server exited with an error", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
