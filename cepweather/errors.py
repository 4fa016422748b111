"""Externally visible error kinds and their fixed status/message pairs."""

from __future__ import annotations

from enum import Enum

from fastapi import HTTPException


class ErrorKind(str, Enum):
    INVALID_CEP = "invalid_cep"
    CEP_NOT_FOUND = "cep_not_found"
    WEATHER_UNAVAILABLE = "weather_unavailable"
    INVALID_BODY = "invalid_body"
    INVALID_GATEWAY_CEP = "invalid_gateway_cep"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"

    @property
    def status_code(self) -> int:
        return _RESPONSES[self][0]

    @property
    def message(self) -> str:
        return _RESPONSES[self][1]


_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.INVALID_CEP: (422, "invalid zipcode"),
    ErrorKind.CEP_NOT_FOUND: (404, "can not find zipcode"),
    ErrorKind.WEATHER_UNAVAILABLE: (500, "weather error"),
    ErrorKind.INVALID_BODY: (400, "invalid body"),
    ErrorKind.INVALID_GATEWAY_CEP: (422, "invalid cep"),
    ErrorKind.UPSTREAM_UNREACHABLE: (502, "weather service unreachable"),
}


class PipelineError(Exception):
    """Raised by the weather pipeline; carries the kind surfaced to callers."""

    def __init__(self, kind: ErrorKind) -> None:
        super().__init__(kind.message)
        self.kind = kind


def http_error(kind: ErrorKind) -> HTTPException:
    return HTTPException(status_code=kind.status_code, detail=kind.message)
