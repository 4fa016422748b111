from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from cepweather.config import get_settings
from cepweather.main import gateway_app, weather_app
from cepweather.observability.tracing import TracerHandle
from fakes import CEP_HOST, SERVICE_B_HOST, WEATHER_HOST, FakeUpstreams


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CEP_API_URL", f"http://{CEP_HOST}/ws")
    monkeypatch.setenv("WEATHER_API_URL", f"http://{WEATHER_HOST}/v1")
    monkeypatch.setenv("WEATHERAPI_KEY", "test-key")
    monkeypatch.setenv("SERVICE_B_URL", f"http://{SERVICE_B_HOST}/weather")
    monkeypatch.setenv("TRACING_ENABLED", "false")
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer_handle(span_exporter: InMemorySpanExporter) -> TracerHandle:
    provider = TracerProvider(shutdown_on_exit=False)
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return TracerHandle(provider=provider)


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
async def upstream_http(upstreams: FakeUpstreams) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstreams)) as client:
        yield client


@pytest.fixture
async def weather_api(upstream_http: httpx.AsyncClient, tracer_handle: TracerHandle) -> AsyncIterator[AsyncClient]:
    weather_app.state.http_client = tracer_handle.instrument_http_client(upstream_http)
    weather_app.state.tracing = tracer_handle
    transport = ASGITransport(app=weather_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    weather_app.state.http_client = None
    weather_app.state.tracing = None


@pytest.fixture
async def gateway_api(upstream_http: httpx.AsyncClient) -> AsyncIterator[AsyncClient]:
    gateway_app.state.http_client = upstream_http
    gateway_app.state.tracing = TracerHandle.disabled()
    transport = ASGITransport(app=gateway_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    gateway_app.state.http_client = None
    gateway_app.state.tracing = None
