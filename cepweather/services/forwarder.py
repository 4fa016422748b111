from __future__ import annotations

from dataclasses import dataclass

import httpx

from cepweather.observability.upstream import observe_upstream_call
from cepweather.upstream.errors import UpstreamError


@dataclass(frozen=True)
class ForwardedResponse:
    status_code: int
    body: bytes
    content_type: str


async def forward_cep(http_client: httpx.AsyncClient, weather_service_url: str, cep: str) -> ForwardedResponse:
    """Ask the weather service about `cep` and hand back its answer untouched."""

    with observe_upstream_call(operation="weather_service.forward", cep=cep):
        try:
            response = await http_client.get(weather_service_url, params={"cep": cep})
        except (httpx.HTTPError, httpx.InvalidURL) as err:
            raise UpstreamError(f"weather service unreachable: {err}") from err

    return ForwardedResponse(
        status_code=response.status_code,
        body=response.content,
        content_type=response.headers.get("content-type", "application/json"),
    )
