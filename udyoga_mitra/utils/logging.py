"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any, Dict

import structlog

from udyoga_mitra.core.config import get_settings


def configure_logging() -> None:
    """Configure structured logging for the API process."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Standard library logging (uvicorn, SQLAlchemy echo)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def session_log_context(session: Any) -> Dict[str, Any]:
    """Key-value context identifying the caller of a request."""
    return {
        "account_id": session.account_id,
        "user_type": session.user_type,
    }
