"""
orderdesk.services.storage

Deadline + error translation around storage calls.

Responsibilities:
- Bound every storage operation by the configured deadline.
- Log storage failures with operation context and raise `InternalError`
  (or `DependencyTimeout`) without leaking driver messages to clients.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from orderdesk.errors import DependencyTimeout, InternalError


@asynccontextmanager
async def storage_call(
    *,
    op: str,
    timeout: float,
    log: structlog.stdlib.BoundLogger,
    **scope: Any,
) -> AsyncIterator[None]:
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as e:
        log.error("storage_timeout", op=op, timeout_s=timeout, **scope)
        raise DependencyTimeout(f"{op} timed out after {timeout}s") from e
    except SQLAlchemyError as e:
        log.error("storage_failed", op=op, err=str(e), **scope)
        raise InternalError(f"{op} failed: {e}") from e


# --- Module Notes -----------------------------------------------------------
# Errors from the `orderdesk.errors` taxonomy raised inside the block pass through
# untouched; only driver/timeout failures are translated.
