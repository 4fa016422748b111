from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field


class WeatherReport(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    city: str
    temp_c: float = Field(alias="temp_C")
    temp_f: float = Field(alias="temp_F")
    temp_k: float = Field(alias="temp_K")

    @classmethod
    def from_celsius(cls, city: str, temp_c: float) -> WeatherReport:
        return cls(
            city=city,
            temp_c=temp_c,
            temp_f=temp_c * 1.8 + 32,
            temp_k=temp_c + 273,
        )


class CepRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    # A missing or null field is an empty (and therefore invalid) CEP.
    cep: str | None = None

    @classmethod
    def from_body(cls, raw: bytes) -> CepRequest:
        """Decode a request body; a bare JSON `null` decodes to an empty request."""

        data = json.loads(raw)
        return cls.model_validate({} if data is None else data)
