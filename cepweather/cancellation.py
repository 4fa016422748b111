from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import anyio
import structlog
from starlette.requests import Request

T = TypeVar("T")


class ClientDisconnected(Exception):
    """The caller went away before the response was ready."""


async def run_until_disconnected(request: Request, work: Callable[[], Awaitable[T]]) -> T:
    """Run `work`, cancelling it (and its outbound calls) if the client disconnects.

    The watcher drains every ASGI message still pending on the request, body
    chunks included, so read any body you need before calling this. Exceptions
    raised by `work` propagate unchanged.
    """

    outcome: dict[str, Any] = {}

    async def watch(scope: anyio.CancelScope) -> None:
        while True:
            message = await request.receive()
            if message.get("type") == "http.disconnect":
                outcome["disconnected"] = True
                scope.cancel()
                return

    async def run(scope: anyio.CancelScope) -> None:
        try:
            outcome["result"] = await work()
        except Exception as exc:  # re-raised below, outside the task group
            outcome["error"] = exc
        scope.cancel()

    async with anyio.create_task_group() as tg:
        tg.start_soon(watch, tg.cancel_scope)
        tg.start_soon(run, tg.cancel_scope)

    if "error" in outcome:
        raise outcome["error"]
    if "result" not in outcome:
        structlog.get_logger(__name__).info("client_disconnected")
        raise ClientDisconnected()
    return outcome["result"]
