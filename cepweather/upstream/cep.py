"""ViaCEP client: postal code to city name."""

from __future__ import annotations

from typing import Any

import httpx
from opentelemetry import trace

from cepweather.observability.upstream import observe_upstream_call
from cepweather.upstream.errors import LocationNotFoundError, UpstreamError


def _not_found_flag(payload: dict[str, Any]) -> bool:
    # ViaCEP has answered both `true` and `"true"` for unknown codes.
    flag = payload.get("erro")
    return flag is True or (isinstance(flag, str) and flag.lower() == "true")


class CepClient:
    """Resolves a postal code to the city ("localidade") it belongs to."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, tracer: trace.Tracer) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._tracer = tracer

    def _url(self, cep: str) -> str:
        return f"{self._base_url}/{cep}/json/"

    async def lookup(self, cep: str) -> str:
        with self._tracer.start_as_current_span("viacep.lookup") as span:
            span.set_attribute("cep", cep)
            try:
                with observe_upstream_call(operation="viacep.lookup", cep=cep):
                    city = await self._fetch_city(cep)
            except LocationNotFoundError:
                span.set_attribute("lookup.outcome", "not_found")
                raise
            except UpstreamError as err:
                span.set_attribute("lookup.outcome", "upstream_error")
                if err.status_code is not None:
                    span.set_attribute("http.status_code", err.status_code)
                raise

            span.set_attribute("lookup.outcome", "found")
            span.set_attribute("city", city)
            return city

    async def _fetch_city(self, cep: str) -> str:
        try:
            response = await self._http.get(self._url(cep))
        except (httpx.HTTPError, httpx.InvalidURL) as err:
            raise UpstreamError(f"CEP lookup request failed: {err}") from err

        if not response.is_success:
            raise UpstreamError("cep status not ok", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as err:
            raise UpstreamError("CEP lookup returned an undecodable body", status_code=response.status_code) from err
        if not isinstance(payload, dict):
            raise UpstreamError("CEP lookup returned an unexpected body", status_code=response.status_code)

        city = payload.get("localidade")
        if _not_found_flag(payload) or not city or not isinstance(city, str):
            raise LocationNotFoundError(f"no place for CEP {cep}")
        return city
