"""Pydantic schemas for request/response validation in the URL shortener.

Schema Hierarchy
=================
::
    SaveRequest (Input)
    ├─ url: str (validated absolute URL)
    └─ alias: str | None (optional, ASCII alphanumeric; "" means generate)

    SaveResponse (Output)
    ├─ status: "OK"
    └─ alias: str

    ErrorResponse (Output)
    ├─ status: "Error"
    └─ error: str

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ database: HealthStatus

Key Behaviours
===============
- URL validation uses the validators library for RFC compliance.
- Aliases must be 1..64 ASCII letters or digits.
- The store never re-validates; everything reaching it went through here.
"""

import validators
from pydantic import BaseModel, field_validator

from shortener.enums import HealthStatus, ResponseStatus
from shortener.models import ALIAS_MAX_LENGTH

__all__ = [
    "SaveRequest",
    "SaveResponse",
    "ErrorResponse",
    "HealthResponse",
]


class SaveRequest(BaseModel):
    url: str
    alias: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not validators.url(v):
            raise ValueError("Invalid URL provided")
        return v

    @field_validator("alias", mode="before")
    @classmethod
    def empty_alias_means_generate(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("alias")
    @classmethod
    def validate_alias(cls, v: str | None) -> str | None:
        if v is not None:
            if len(v) > ALIAS_MAX_LENGTH:
                raise ValueError(f"Alias must be at most {ALIAS_MAX_LENGTH} characters")
            if not (v.isascii() and v.isalnum()):
                raise ValueError("Alias must be alphanumeric")
        return v


class SaveResponse(BaseModel):
    status: ResponseStatus = ResponseStatus.OK
    alias: str


class ErrorResponse(BaseModel):
    status: ResponseStatus = ResponseStatus.ERROR
    error: str


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
