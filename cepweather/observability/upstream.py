from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from time import perf_counter
from typing import Any

import structlog


@contextmanager
def observe_upstream_call(*, operation: str, **fields: Any) -> Iterator[None]:
    """Time an outbound call and emit a structured log event for it."""

    logger = structlog.get_logger("upstream")
    start = perf_counter()
    try:
        yield
    except Exception as exc:
        elapsed_ms = (perf_counter() - start) * 1000.0
        logger.warning(
            "upstream_call_failed",
            operation=operation,
            error=type(exc).__name__,
            status_code=getattr(exc, "status_code", None),
            elapsed_ms=round(elapsed_ms, 2),
            **fields,
        )
        raise

    elapsed_ms = (perf_counter() - start) * 1000.0
    logger.info(
        "upstream_call",
        operation=operation,
        elapsed_ms=round(elapsed_ms, 2),
        **fields,
    )
