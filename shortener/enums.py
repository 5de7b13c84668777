"""Shared enums for the URL shortener application.

This module defines all status and state enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["AppEnv", "HealthStatus", "ResponseStatus", "OperationStatus"]


class AppEnv(StrEnum):
    """Deployment environment; selects the log format and level."""

    LOCAL = "local"
    DEV = "dev"
    PROD = "prod"


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ResponseStatus(StrEnum):
    """Envelope status returned in every JSON body of the HTTP API."""

    OK = "OK"
    ERROR = "Error"


class OperationStatus(StrEnum):
    """Outcome labels for store metrics and logging."""

    SUCCESS = "success"
    ALIAS_EXISTS = "alias_exists"
    EXHAUSTED = "exhausted"
    NOT_FOUND = "not_found"
    STORAGE_ERROR = "storage_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"
