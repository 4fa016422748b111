from cepweather.upstream.cep import CepClient
from cepweather.upstream.errors import LocationNotFoundError, UpstreamClientError, UpstreamError
from cepweather.upstream.weather import WeatherClient

__all__ = [
    "CepClient",
    "LocationNotFoundError",
    "UpstreamClientError",
    "UpstreamError",
    "WeatherClient",
]
