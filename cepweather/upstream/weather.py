"""WeatherAPI client: city name to current temperature in Celsius."""

from __future__ import annotations

import httpx
from opentelemetry import trace

from cepweather.observability.upstream import observe_upstream_call
from cepweather.upstream.errors import UpstreamError


class WeatherClient:
    def __init__(self, http_client: httpx.AsyncClient, base_url: str, api_key: str, tracer: trace.Tracer) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._tracer = tracer

    async def current_temperature(self, city: str) -> float:
        with self._tracer.start_as_current_span("weatherapi.current") as span:
            span.set_attribute("city", city)
            try:
                with observe_upstream_call(operation="weatherapi.current", city=city):
                    return await self._fetch_temp_c(city)
            except UpstreamError as err:
                if err.status_code is not None:
                    span.set_attribute("http.status_code", err.status_code)
                raise

    async def _fetch_temp_c(self, city: str) -> float:
        try:
            # httpx escapes the query values, city names carry spaces and accents.
            response = await self._http.get(
                f"{self._base_url}/current.json",
                params={"key": self._api_key, "q": city},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as err:
            raise UpstreamError(f"weather request failed: {err}") from err

        if not response.is_success:
            raise UpstreamError("weather status not ok", status_code=response.status_code)

        try:
            payload = response.json()
            temp_c = payload["current"]["temp_c"]
        except (ValueError, KeyError, TypeError) as err:
            raise UpstreamError("weather returned an undecodable body", status_code=response.status_code) from err

        if isinstance(temp_c, bool) or not isinstance(temp_c, (int, float)):
            raise UpstreamError("weather returned a non-numeric temperature", status_code=response.status_code)
        return float(temp_c)
