from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    gateway_port: int = Field(default=8080, alias="SERVICE_A_PORT")
    weather_port: int = Field(default=8081, alias="SERVICE_B_PORT")
    weather_service_url: str = Field(default="http://service-b:8081/weather", alias="SERVICE_B_URL")

    cep_api_url: str = Field(default="https://viacep.com.br/ws", alias="CEP_API_URL")
    weather_api_url: str = Field(default="http://api.weatherapi.com/v1", alias="WEATHER_API_URL")
    weather_api_key: str = Field(default="", alias="WEATHERAPI_KEY")
    upstream_timeout_seconds: float = Field(default=10.0, alias="UPSTREAM_TIMEOUT_SECONDS")

    otlp_endpoint: str = Field(default="otel-collector:4317", alias="OTEL_EXPORTER_OTLP_ENDPOINT")
    tracing_enabled: bool = Field(default=True, alias="TRACING_ENABLED")
    tracing_connect_attempts: int = Field(default=5, alias="TRACING_CONNECT_ATTEMPTS")
    tracing_connect_timeout_seconds: float = Field(default=5.0, alias="TRACING_CONNECT_TIMEOUT_SECONDS")
    tracing_retry_delay_seconds: float = Field(default=2.0, alias="TRACING_RETRY_DELAY_SECONDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
