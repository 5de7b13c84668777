"""Request-scoped dependencies for the HTTP API.

Shared resources (database handle, store, settings, logger) are created once
by the application lifespan and kept on ``app.state``. The functions here hand
them to route handlers and wrap each request in a small tracking context.
"""

import logging
import secrets
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from shortener.config import Settings
from shortener.database import Database
from shortener.storage import URLStorage

__all__ = [
    "RequestContext",
    "get_settings_from_app",
    "get_database",
    "get_storage",
    "get_request_context",
    "require_writer",
]

security = HTTPBasic()


# ============================================================================
# LIGHTWEIGHT REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request tracking data.

    Attributes:
        settings: Application settings
        base_logger: Shared application logger
        request_id: Taken from X-Request-ID, or a fresh UUID4
        client_ip: Client IP address
        start_time: Request start timestamp
    """

    settings: Settings
    base_logger: logging.Logger
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    client_ip: Optional[str] = None
    start_time: float = field(default_factory=time.perf_counter)

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Shared logger with request_id attached to every record."""
        return logging.LoggerAdapter(self.base_logger, {"request_id": self.request_id})

    @property
    def timeout(self) -> float:
        return self.settings.REQUEST_TIMEOUT_SECONDS

    def get_duration(self) -> float:
        """Get request duration in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_storage(request: Request) -> URLStorage:
    return request.app.state.storage


def get_request_context(
    request: Request,
    settings: Settings = Depends(get_settings_from_app),
) -> RequestContext:
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    return RequestContext(
        settings=settings,
        base_logger=request.app.state.logger,
        request_id=request_id,
        client_ip=request.client.host if request.client else None,
    )


def require_writer(
    credentials: HTTPBasicCredentials = Depends(security),
    settings: Settings = Depends(get_settings_from_app),
) -> str:
    """Authenticate the single trusted writer.

    Returns:
        str: The authenticated username.

    Raises:
        HTTPException: 401 if the username or password does not match.
    """
    user_ok = secrets.compare_digest(credentials.username.encode(), settings.HTTP_USER.encode())
    password_ok = secrets.compare_digest(
        credentials.password.encode(),
        settings.HTTP_PASSWORD.get_secret_value().encode(),
    )
    if not (user_ok and password_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
