"""
Structured logging configuration using structlog.

This module provides a consistent logging setup across the application.
It supports both development (colored console) and production (JSON) output.

Usage:
    from core.logging import configure_logging, get_logger

    # Configure once at startup
    configure_logging(json_logs=False)  # Development
    configure_logging(json_logs=True)   # Production

    # Get a logger
    logger = get_logger(__name__)

    # Log with context
    logger.info("Avatar created", user_id="123", avatar_id="abc")
    logger.error("Upload failed", error=str(e), bucket="wardrobes")
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import Processor


def configure_logging(
    json_logs: bool = False,
    log_level: str = "INFO",
    include_timestamp: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        json_logs: If True, output JSON format (for production).
                   If False, output colored console format (for development).
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_timestamp: Whether to include timestamp in logs
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "hpack", "openai", "urllib3", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__). If None, returns root logger.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables to all subsequent logs in the current context.

    Used for request-scoped context like user_id, request_id.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """
    Clear all bound context variables.

    Call this at the end of request processing to avoid context leaking.
    """
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    """Unbind specific context variables."""
    structlog.contextvars.unbind_contextvars(*keys)


@contextmanager
def log_stage(
    logger: structlog.stdlib.BoundLogger,
    stage: str,
    **fields: Any,
) -> Iterator[None]:
    """
    Log the start and outcome of one pipeline stage with its latency.

    Exceptions are logged with the stage name and re-raised unchanged.

    Usage:
        with log_stage(logger, "describe", user_id=user_id):
            description = client.describe(...)
    """
    start = time.perf_counter()
    logger.info("Stage started", stage=stage, **fields)
    try:
        yield
    except Exception as e:
        logger.warning(
            "Stage failed",
            stage=stage,
            error=str(e),
            error_type=type(e).__name__,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            **fields,
        )
        raise
    logger.info(
        "Stage completed",
        stage=stage,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        **fields,
    )


class LoggerMixin:
    """
    Mixin class that provides a logger property.

    Usage:
        class FeedService(LoggerMixin):
            def list_posts(self):
                self.logger.info("Listing posts")
    """

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return get_logger(self.__class__.__name__)
