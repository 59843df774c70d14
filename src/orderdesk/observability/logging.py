"""
orderdesk.observability.logging

Structured logging configuration for the service.

Responsibilities:
- Configure `structlog` for JSON logs with a stable `service` field.
- Hand out bound loggers that components enrich with `component`/`op` keys.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
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


def get_logger(name: str, **initial: Any) -> structlog.stdlib.BoundLogger:
    log = structlog.get_logger(name)
    return log.bind(**initial) if initial else log


# --- Module Notes -----------------------------------------------------------
# Request metadata (request_id/path/method) is bound in `observability.middleware`;
# operation-level keys (op, business_id, subject) are passed explicitly at call sites.
