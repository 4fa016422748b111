from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, FastAPI, Request, Response

from cepweather.api.dependencies import build_http_client
from cepweather.api.gateway import router as gateway_router
from cepweather.api.weather import router as weather_router
from cepweather.cancellation import ClientDisconnected
from cepweather.config import get_settings
from cepweather.observability.logging import configure_logging
from cepweather.observability.middleware import RequestContextMiddleware
from cepweather.observability.tracing import TracerHandle, init_tracing

WEATHER_SERVICE_NAME = "service-b"
GATEWAY_SERVICE_NAME = "service-a"

# nginx's "client closed request"; never read by anyone.
CLIENT_CLOSED_REQUEST = 499


def _lifespan(service_name: str):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = get_settings()
        configure_logging(settings.log_level, service=service_name)

        if settings.tracing_enabled:
            tracing = init_tracing(
                service_name,
                settings.otlp_endpoint,
                attempts=settings.tracing_connect_attempts,
                attempt_timeout=settings.tracing_connect_timeout_seconds,
                retry_delay=settings.tracing_retry_delay_seconds,
            )
        else:
            tracing = TracerHandle.disabled()
        http_client = build_http_client(settings, tracing)
        app.state.tracing = tracing
        app.state.http_client = http_client
        structlog.get_logger("startup").info("service_started", service=service_name, tracing_active=tracing.active)

        try:
            yield
        finally:
            await http_client.aclose()
            tracing.shutdown()

    return lifespan


async def _client_disconnected(request: Request, exc: ClientDisconnected) -> Response:
    return Response(status_code=CLIENT_CLOSED_REQUEST)


def create_app(service_name: str, router: APIRouter, title: str) -> FastAPI:
    app = FastAPI(title=title, version="0.1.0", lifespan=_lifespan(service_name))
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(ClientDisconnected, _client_disconnected)
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


weather_app = create_app(WEATHER_SERVICE_NAME, weather_router, "CEP Weather")
gateway_app = create_app(GATEWAY_SERVICE_NAME, gateway_router, "CEP Weather Gateway")
