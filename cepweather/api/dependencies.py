from __future__ import annotations

import httpx
from fastapi import Depends, Request

from cepweather.config import Settings, get_settings
from cepweather.observability.tracing import TracerHandle
from cepweather.upstream.cep import CepClient
from cepweather.upstream.weather import WeatherClient


def build_http_client(settings: Settings, tracing: TracerHandle) -> httpx.AsyncClient:
    client = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)
    return tracing.instrument_http_client(client)


# Both are set by the application lifespan before any request is served.
def get_tracer_handle(request: Request) -> TracerHandle:
    return request.app.state.tracing


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_cep_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    tracing: TracerHandle = Depends(get_tracer_handle),
) -> CepClient:
    settings = get_settings()
    return CepClient(http_client, settings.cep_api_url, tracing.tracer("cep"))


def get_weather_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    tracing: TracerHandle = Depends(get_tracer_handle),
) -> WeatherClient:
    settings = get_settings()
    return WeatherClient(http_client, settings.weather_api_url, settings.weather_api_key, tracing.tracer("weather"))
