from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError

from cepweather.api.dependencies import get_http_client
from cepweather.cancellation import run_until_disconnected
from cepweather.config import get_settings
from cepweather.errors import ErrorKind, http_error
from cepweather.models.schemas import CepRequest
from cepweather.services.forwarder import forward_cep
from cepweather.upstream.errors import UpstreamError
from cepweather.validation import is_valid_cep

router = APIRouter(tags=["gateway"])


@router.post("/weather")
async def forward_weather(
    request: Request,
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Response:
    try:
        payload = CepRequest.from_body(await request.body())
    except (ValueError, ValidationError) as exc:
        raise http_error(ErrorKind.INVALID_BODY) from exc

    cep = payload.cep or ""
    if not is_valid_cep(cep):
        raise http_error(ErrorKind.INVALID_GATEWAY_CEP)

    settings = get_settings()
    try:
        upstream = await run_until_disconnected(
            request,
            lambda: forward_cep(http_client, settings.weather_service_url, cep),
        )
    except UpstreamError as err:
        raise http_error(ErrorKind.UPSTREAM_UNREACHABLE) from err

    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
    )
