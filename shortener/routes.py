"""FastAPI route definitions for the URL shortener REST API.

The handlers are thin: parse, call the store, map the outcome to HTTP.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    GET  /metrics                  (mounted by the instrumentator in main.py)
        └─ Prometheus text exposition (200)

    POST /url                      (HTTP Basic auth)
        ├─ SaveRequest (request body)
        └─ SaveResponse (200) or ErrorResponse 409/503/504, 401, 422

    GET  /:alias
        └─ 302 Redirect or ErrorResponse 404

Error Mapping
=============
::
    AliasExistsError           → 409 "url already exists"
    AliasSpaceExhaustedError   → 503 "failed to generate alias"
    StorageUnavailableError    → 503 "storage unavailable"
    DeadlineExceededError      → 504 "request timed out"
    URLNotFoundError           → 404 "not found"

Key Behaviours
===============
- Every store call carries REQUEST_TIMEOUT_SECONDS as its deadline.
- Only POST /url needs credentials; redirects are public.
- /health is declared before /:alias, and /metrics is exposed before this
  router is included, so neither is shadowed by the catch-all alias route.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, RedirectResponse

from shortener.database import Database
from shortener.dependencies import (
    RequestContext,
    get_database,
    get_request_context,
    get_storage,
    require_writer,
)
from shortener.enums import HealthStatus
from shortener.exceptions import (
    AliasExistsError,
    AliasSpaceExhaustedError,
    DeadlineExceededError,
    StorageUnavailableError,
    URLNotFoundError,
)
from shortener.schemas import ErrorResponse, HealthResponse, SaveRequest, SaveResponse
from shortener.storage import URLStorage

__all__ = ["router"]

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump(mode="json"))


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(
    ctx: RequestContext = Depends(get_request_context),
    database: Database = Depends(get_database),
) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    try:
        await database.ping()
    except Exception as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY

    return HealthResponse(status=db_status, database=db_status)


@router.post(
    "/url",
    response_model=SaveResponse,
    responses={
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    tags=["urls"],
)
async def save_url(
    payload: SaveRequest,
    user: str = Depends(require_writer),
    ctx: RequestContext = Depends(get_request_context),
    storage: URLStorage = Depends(get_storage),
):
    ctx.logger.info(f"Save requested by {user}: url={payload.url} alias={payload.alias}")

    try:
        alias = await storage.save_url(payload.url, payload.alias, timeout=ctx.timeout)
    except AliasExistsError:
        ctx.logger.info(f"Url already exists: {payload.alias}")
        return _error(status.HTTP_409_CONFLICT, "url already exists")
    except AliasSpaceExhaustedError:
        ctx.logger.error("Failed to generate a free alias")
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "failed to generate alias")
    except StorageUnavailableError:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "storage unavailable")
    except DeadlineExceededError:
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "request timed out")

    ctx.logger.info(f"Url added: {alias} in {ctx.get_duration():.1f}ms")
    return SaveResponse(alias=alias)


@router.get(
    "/{alias}",
    status_code=status.HTTP_302_FOUND,
    responses={404: {"model": ErrorResponse}},
    tags=["redirect"],
)
async def redirect(
    alias: str,
    ctx: RequestContext = Depends(get_request_context),
    storage: URLStorage = Depends(get_storage),
):
    try:
        url = await storage.resolve_url(alias, timeout=ctx.timeout)
    except URLNotFoundError:
        return _error(status.HTTP_404_NOT_FOUND, "not found")
    except StorageUnavailableError:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "storage unavailable")
    except DeadlineExceededError:
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "request timed out")

    ctx.logger.info(f"Redirecting {alias} -> {url}")
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
