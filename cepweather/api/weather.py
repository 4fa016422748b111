from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from cepweather.api.dependencies import get_cep_client, get_weather_client
from cepweather.cancellation import run_until_disconnected
from cepweather.errors import ErrorKind, PipelineError, http_error
from cepweather.models.schemas import WeatherReport
from cepweather.services.pipeline import resolve_weather
from cepweather.upstream.cep import CepClient
from cepweather.upstream.weather import WeatherClient
from cepweather.validation import is_valid_cep

router = APIRouter(tags=["weather"])


@router.get("/weather", response_model=WeatherReport)
async def weather_by_cep(
    request: Request,
    cep: str = "",
    cep_client: CepClient = Depends(get_cep_client),
    weather_client: WeatherClient = Depends(get_weather_client),
) -> WeatherReport:
    if not is_valid_cep(cep):
        raise http_error(ErrorKind.INVALID_CEP)

    try:
        return await run_until_disconnected(
            request,
            lambda: resolve_weather(cep, cep_client=cep_client, weather_client=weather_client),
        )
    except PipelineError as err:
        raise http_error(err.kind) from err
