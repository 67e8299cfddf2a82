"""
salon_identity.observability.logging

Structured logging configuration.

Responsibilities:
- Configure `structlog` for JSON logs.
- Provide a small wrapper for obtaining bound loggers.
- Redact tokens to a short preview before they reach a log line.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_PREVIEW_CHARS = 12


def configure_logging(*, service_name: str, level: str) -> None:
    """
    Structured JSON logs; call once from the composition root.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def token_preview(token: str | None) -> str | None:
    # Enough to tell a signed token from a pseudo-token, never enough to replay it.
    if not token:
        return None
    return token[:_PREVIEW_CHARS] + ("..." if len(token) > _PREVIEW_CHARS else "")


# --- Module Notes -----------------------------------------------------------
# Per-capture metadata is bound via structlog contextvars in `matching.session`.
