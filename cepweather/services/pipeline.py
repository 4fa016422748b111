from __future__ import annotations

import structlog

from cepweather.errors import ErrorKind, PipelineError
from cepweather.models.schemas import WeatherReport
from cepweather.upstream.cep import CepClient
from cepweather.upstream.errors import LocationNotFoundError, UpstreamError
from cepweather.upstream.weather import WeatherClient

logger = structlog.get_logger(__name__)


async def resolve_weather(cep: str, *, cep_client: CepClient, weather_client: WeatherClient) -> WeatherReport:
    """Resolve a validated CEP to its city's current temperature.

    The weather lookup only runs once the CEP lookup produced a city. A missing
    CEP and an unavailable lookup service both surface as CEP_NOT_FOUND; the
    distinction is kept in logs and span attributes only.
    """

    try:
        city = await cep_client.lookup(cep)
    except LocationNotFoundError as err:
        logger.info("cep_not_found", cep=cep, cause="not_found")
        raise PipelineError(ErrorKind.CEP_NOT_FOUND) from err
    except UpstreamError as err:
        logger.info("cep_not_found", cep=cep, cause="upstream_error", status_code=err.status_code)
        raise PipelineError(ErrorKind.CEP_NOT_FOUND) from err

    try:
        temp_c = await weather_client.current_temperature(city)
    except UpstreamError as err:
        logger.warning("weather_unavailable", city=city, status_code=err.status_code)
        raise PipelineError(ErrorKind.WEATHER_UNAVAILABLE) from err

    return WeatherReport.from_celsius(city, temp_c)
