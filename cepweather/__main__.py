from __future__ import annotations

import argparse

import uvicorn

from cepweather.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one of the CEP weather services")
    parser.add_argument("service", choices=["weather", "gateway"], help="weather: CEP lookup service; gateway: input gateway")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (defaults to SERVICE_A_PORT/SERVICE_B_PORT)")
    args = parser.parse_args()

    settings = get_settings()
    if args.service == "weather":
        target, default_port = "cepweather.main:weather_app", settings.weather_port
    else:
        target, default_port = "cepweather.main:gateway_app", settings.gateway_port

    uvicorn.run(target, host=args.host, port=args.port or default_port, log_config=None)


if __name__ == "__main__":
    main()
