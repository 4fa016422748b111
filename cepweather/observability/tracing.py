"""OpenTelemetry bootstrap that never takes the service down.

`init_tracing` tries to reach the OTLP collector a bounded number of times.
If it cannot, the returned handle hands out no-op tracers and its shutdown
does nothing, so callers treat both outcomes the same way.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from threading import Lock

import grpc
import httpx
import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator


DEFAULT_ENDPOINT = "otel-collector:4317"
DEFAULT_ATTEMPTS = 5
DEFAULT_ATTEMPT_TIMEOUT = 5.0
DEFAULT_RETRY_DELAY = 2.0

logger = structlog.get_logger("tracing")


class TracerHandle:
    """Owns the tracer provider of one process; released once via `shutdown`."""

    def __init__(self, provider: TracerProvider | None = None) -> None:
        self._provider = provider
        self._lock = Lock()
        self._closed = False

    @classmethod
    def disabled(cls) -> TracerHandle:
        return cls(provider=None)

    @property
    def active(self) -> bool:
        return self._provider is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def tracer_provider(self) -> trace.TracerProvider:
        if self._provider is None:
            return trace.NoOpTracerProvider()
        return self._provider

    def instrument_http_client(self, client: httpx.AsyncClient) -> httpx.AsyncClient:
        """Emit a client span per outbound request and inject trace headers."""

        HTTPXClientInstrumentor.instrument_client(client, tracer_provider=self.tracer_provider)
        return client

    def tracer(self, name: str) -> trace.Tracer:
        if self._provider is None:
            return trace.NoOpTracer()
        return self._provider.get_tracer(name)

    def shutdown(self) -> None:
        """Flush pending spans and close the exporter. Later calls do nothing."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._provider is not None:
            self._provider.shutdown()


def wait_for_grpc_endpoint(endpoint: str, timeout: float) -> None:
    """Block until a gRPC channel to `endpoint` is ready, or raise on timeout."""

    channel = grpc.insecure_channel(endpoint)
    try:
        grpc.channel_ready_future(channel).result(timeout=timeout)
    finally:
        channel.close()


def _otlp_exporter(endpoint: str) -> SpanExporter:
    return OTLPSpanExporter(endpoint=endpoint, insecure=True)


def init_tracing(
    service_name: str,
    endpoint: str | None = None,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    connect: Callable[[str, float], None] = wait_for_grpc_endpoint,
    exporter_factory: Callable[[str], SpanExporter] = _otlp_exporter,
    sleep: Callable[[float], None] = time.sleep,
    install_global: bool = True,
) -> TracerHandle:
    endpoint = endpoint or DEFAULT_ENDPOINT
    attempts = max(1, attempts)

    connected = False
    for attempt in range(1, attempts + 1):
        try:
            connect(endpoint, attempt_timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "tracing_connect_failed",
                endpoint=endpoint,
                attempt=attempt,
                attempts=attempts,
                error=repr(exc),
            )
            if attempt < attempts:
                sleep(retry_delay)
            continue
        connected = True
        break

    if not connected:
        logger.warning("tracing_disabled", endpoint=endpoint, reason="collector unreachable")
        return TracerHandle.disabled()

    try:
        exporter = exporter_factory(endpoint)
    except Exception as exc:  # noqa: BLE001
        logger.warning("tracing_disabled", endpoint=endpoint, reason="exporter setup failed", error=repr(exc))
        return TracerHandle.disabled()

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: service_name}),
        sampler=ALWAYS_ON,
        shutdown_on_exit=False,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))

    if install_global:
        trace.set_tracer_provider(provider)
        set_global_textmap(TraceContextTextMapPropagator())

    logger.info("tracing_initialized", service=service_name, endpoint=endpoint)
    return TracerHandle(provider=provider)
