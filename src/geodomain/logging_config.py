"""structlog setup shared by the API, migrations and the simulation script.

Development gets colored console lines; every other environment gets one
JSON object per line. Request-scoped keys (request_id, user_id) are bound
through structlog.contextvars by the middleware and merged into each entry.

Buyer contact details must never reach the logs, since keeping them away from
sellers until a deal exists is the point of moderation. The redaction
processor masks them wherever they appear in an event.

Usage:
    from geodomain.logging_config import setup_logging, get_logger
    setup_logging(log_level="INFO", json_logs=True)
    logger = get_logger(__name__)
    logger.info("inquiry.created", inquiry_id="abc-123", buyer_email="x@y.z")
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

REDACTED_KEYS = frozenset({"buyer_email", "buyer_phone", "email", "phone"})
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncio", "httpx")


def redact_contact_details(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask contact fields, keeping only the first character."""
    for key in REDACTED_KEYS & event_dict.keys():
        value = event_dict[key]
        if value:
            event_dict[key] = f"{str(value)[:1]}***"
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Route stdlib and structlog output through one formatter on stdout."""
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_contact_details,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.getLevelName(log_level.upper()))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
