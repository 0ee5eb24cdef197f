"""Structured logging configuration using structlog.

Provides JSON-structured logging in production and human-readable colored
output in development. Orchestration services bind the aggregate id to
every entry so a listing, agent or deal can be traced across calls.

Usage:
    from amlaki_marketplace.logging_config import setup_logging, get_logger
    setup_logging(log_level="DEBUG", json_logs=False)
    logger = get_logger()
    logger.info("deal.started", deal_id="abc-123", price="1000 IRR")

    with bind_aggregate(deal_id="abc-123"):
        logger.info("listing.sold")  # carries deal_id
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from enum import Enum

import structlog


_DOMAIN_SCALARS = (uuid.UUID, Decimal, Enum)


def _render_domain_values(_logger, _method_name, event_dict):
    """Render ids, amounts and statuses as plain strings, timestamps as ISO."""
    for key, value in event_dict.items():
        if isinstance(value, _DOMAIN_SCALARS):
            event_dict[key] = str(value)
        elif isinstance(value, datetime):
            event_dict[key] = value.isoformat()
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog with shared processors.

    Args:
        log_level: Standard Python log level string (DEBUG, INFO, WARNING, etc.)
        json_logs: If True, output JSON (for production). If False, colored console.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _render_domain_values,
    ]

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def setup_logging_from_settings() -> None:
    """Configure logging from the application settings."""
    from amlaki_marketplace.config import get_settings

    settings = get_settings()
    setup_logging(log_level=settings.app_log_level, json_logs=settings.json_logs)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger with context variable support.
    """
    return structlog.get_logger(name)


@contextmanager
def bind_aggregate(**ids: object) -> Iterator[None]:
    """Bind aggregate ids to every entry logged inside the block.

    Ids are stringified. Bindings are restored on exit, so nested blocks
    (a deal completion closing its listing) stack cleanly.
    """
    with structlog.contextvars.bound_contextvars(**{k: str(v) for k, v in ids.items()}):
        yield
