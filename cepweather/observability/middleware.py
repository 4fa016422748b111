from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from opentelemetry import trace
from opentelemetry.propagate import extract
from starlette.datastructures import MutableHeaders


def _tracer_for(scope: dict[str, Any]) -> trace.Tracer:
    app = scope.get("app")
    handle = getattr(getattr(app, "state", None), "tracing", None)
    if handle is None:
        return trace.NoOpTracer()
    return handle.tracer("http.server")


class RequestContextMiddleware:
    """Adds request_id context, access logs, and a server span per request."""

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path")
        method = scope.get("method")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=method,
        )

        carrier = {key.decode("latin-1"): value.decode("latin-1") for key, value in scope.get("headers", [])}
        parent = extract(carrier)

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        with _tracer_for(scope).start_as_current_span(
            f"{method} {path}",
            context=parent,
            kind=trace.SpanKind.SERVER,
        ) as span:
            span.set_attribute("http.method", method or "")
            span.set_attribute("http.target", path or "")
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                elapsed_ms = (perf_counter() - start) * 1000.0
                span.set_attribute("http.status_code", status_code)

                structlog.get_logger("access").info(
                    "http_request",
                    status_code=status_code,
                    elapsed_ms=round(elapsed_ms, 2),
                )

                structlog.contextvars.clear_contextvars()
