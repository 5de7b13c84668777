"""URL Store - alias allocation and resolution.

This module owns the alias → URL mapping. It exposes two operations,
``save_url`` and ``resolve_url``, and is the only code that reads or
writes the ``urls`` table.

Uniqueness is never checked in Python. Every insert goes straight to the
database and the unique index on ``alias`` decides the winner, so two
concurrent writers racing for the same alias always end with one record
and one ``AliasExistsError`` (or one retry, for generated aliases).

Save Flow
=========
::
    ┌──────────────┐
    │ save_url(url,│
    │   alias?)    │
    └──────┬───────┘
    alias given?
    ┌──────┴───────┐
    │ YES          │ NO
    ▼              ▼
┌──────────┐  ┌──────────────┐
│ INSERT   │  │ attempt = 1  │◄──────────────┐
│ once     │  └──────┬───────┘               │
└────┬─────┘         ▼                       │
     │        ┌──────────────┐               │
     │        │ generate     │               │
     │        │ candidate    │               │
     │        └──────┬───────┘               │
     │               ▼                       │
     │        ┌──────────────┐  unique       │
     │        │ INSERT       ├─ violation ──►│ attempt += 1
     │        └──────┬───────┘  (< max)      │
     │               │                       │
     ▼               ▼            attempt > max
  alias or        candidate   ──► AliasSpaceExhaustedError
  AliasExistsError

Resolve Flow
============
::
    ┌──────────────┐      ┌──────────────┐      ┌──────────────┐
    │ resolve_url  │ ───► │ SELECT url   │ ───► │ url or       │
    │ (alias)      │      │ WHERE alias= │      │ URLNotFound  │
    └──────────────┘      └──────────────┘      └──────────────┘

Error Mapping
=============
- ``IntegrityError`` on insert          → ``AliasExistsError`` (retried when generated)
- any other ``SQLAlchemyError``          → ``StorageUnavailableError`` (never retried)
- empty url or over-long alias          → ``InvalidArgumentError`` (before any I/O)
- caller deadline expired               → ``DeadlineExceededError``
- ``asyncio.CancelledError``            → propagated untouched

Usage Examples
==============
```python
async with Database(settings.DATABASE_URL) as db:
    storage = URLStorage(
        db.sessions,
        generator=AliasGenerator(settings.ALIAS_LENGTH),
        max_attempts=settings.ALIAS_MAX_ATTEMPTS,
    )
    alias = await storage.save_url("https://example.com")
    url = await storage.resolve_url(alias, timeout=2.0)
```
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from prometheus_client import Counter
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shortener.alias import AliasGenerator
from shortener.enums import OperationStatus
from shortener.exceptions import (
    AliasExistsError,
    AliasSpaceExhaustedError,
    DeadlineExceededError,
    InvalidArgumentError,
    StorageUnavailableError,
    URLNotFoundError,
)
from shortener.models import ALIAS_MAX_LENGTH, URL

__all__ = ["DEFAULT_MAX_ATTEMPTS", "URLStorage"]

DEFAULT_MAX_ATTEMPTS = 5


# ============================================================================
# PROMETHEUS METRICS
# ============================================================================

URL_SAVE_REQUESTS_TOTAL = Counter(
    "url_shortener_save_requests_total",
    "Total save operations by outcome",
    ["status", "mode"],
)
URL_RESOLVE_REQUESTS_TOTAL = Counter(
    "url_shortener_resolve_requests_total",
    "Total resolve operations by outcome",
    ["status"],
)
ALIAS_COLLISIONS_TOTAL = Counter(
    "url_shortener_alias_collisions_total",
    "Generated aliases rejected by the unique constraint",
)


# ============================================================================
# CORE STORE CLASS
# ============================================================================

class URLStorage:
    """Uniqueness-enforcing alias → URL store.

    The store holds no in-process locks. Each call opens its own session
    from ``sessions`` and runs one short transaction per insert, so it is
    safe to share one instance between any number of concurrent tasks.

    Args:
        sessions: Session factory, normally ``Database.sessions``.
        generator: Source of candidate aliases for auto-generation.
        max_attempts: Upper bound on generated candidates per save.
        logger: Logger for store events; defaults to ``shortener.storage``.

    Raises:
        InvalidArgumentError: If ``max_attempts`` is less than 1.

    Example:
        >>> storage = URLStorage(db.sessions)
        >>> await storage.save_url("https://example.com", "ex1")
        'ex1'
        >>> await storage.resolve_url("ex1")
        'https://example.com'
    """

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        generator: Optional[AliasGenerator] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        if max_attempts < 1:
            raise InvalidArgumentError(f"max_attempts must be at least 1, got {max_attempts!r}")
        self._sessions = sessions
        self._generator = generator or AliasGenerator()
        self._max_attempts = max_attempts
        self._logger = logger or logging.getLogger(__name__)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    # ========================================================================
    # PUBLIC API METHODS
    # ========================================================================

    async def save_url(self, url: str, alias: Optional[str] = None, *, timeout: Optional[float] = None) -> str:
        """Store ``url`` under ``alias``, or under a generated alias.

        With an alias, exactly one insert is attempted. Without one,
        candidates are generated and inserted until one is accepted or
        ``max_attempts`` candidates have collided.

        Args:
            url: Absolute URL, already validated by the caller.
            alias: Caller-chosen alias; ``None`` or ``""`` means generate one.
            timeout: Deadline in seconds for the whole call, retries included.

        Returns:
            str: The alias the URL is now stored under.

        Raises:
            AliasExistsError: The caller-supplied alias is taken.
            AliasSpaceExhaustedError: Every generated candidate collided.
            StorageUnavailableError: The database failed.
            InvalidArgumentError: ``url`` is empty, or ``alias`` is longer
                than the column allows.
            DeadlineExceededError: ``timeout`` expired first.
        """
        if not url:
            raise InvalidArgumentError("url must be a non-empty string")
        if alias and len(alias) > ALIAS_MAX_LENGTH:
            raise InvalidArgumentError(f"alias must be at most {ALIAS_MAX_LENGTH} characters, got {len(alias)}")
        generated = not alias
        mode = "generated" if generated else "custom"
        try:
            async with self._deadline(timeout, "save"):
                if generated:
                    alias = await self._save_generated(url)
                else:
                    await self._insert(url, alias)
        except AliasExistsError:
            URL_SAVE_REQUESTS_TOTAL.labels(OperationStatus.ALIAS_EXISTS, mode).inc()
            self._logger.warning(f"Alias already exists: {alias}")
            raise
        except AliasSpaceExhaustedError as exc:
            URL_SAVE_REQUESTS_TOTAL.labels(OperationStatus.EXHAUSTED, mode).inc()
            self._logger.warning(f"Alias space exhausted after {exc.attempts} attempts")
            raise
        except StorageUnavailableError as exc:
            URL_SAVE_REQUESTS_TOTAL.labels(OperationStatus.STORAGE_ERROR, mode).inc()
            self._logger.error(f"Failed to save url: {exc}")
            raise
        except DeadlineExceededError as exc:
            URL_SAVE_REQUESTS_TOTAL.labels(OperationStatus.DEADLINE_EXCEEDED, mode).inc()
            self._logger.warning(str(exc))
            raise

        URL_SAVE_REQUESTS_TOTAL.labels(OperationStatus.SUCCESS, mode).inc()
        self._logger.info(f"Saved url: {alias} -> {url}")
        return alias

    async def resolve_url(self, alias: str, *, timeout: Optional[float] = None) -> str:
        """Return the URL stored under ``alias``.

        Matching is exact: no prefix matching, no case folding. The URL is
        returned exactly as it was saved.

        Raises:
            URLNotFoundError: No record has this alias.
            StorageUnavailableError: The database failed.
            DeadlineExceededError: ``timeout`` expired first.
        """
        try:
            async with self._deadline(timeout, "resolve"):
                url = await self._select(alias)
        except StorageUnavailableError as exc:
            URL_RESOLVE_REQUESTS_TOTAL.labels(OperationStatus.STORAGE_ERROR).inc()
            self._logger.error(f"Failed to resolve alias {alias}: {exc}")
            raise
        except DeadlineExceededError as exc:
            URL_RESOLVE_REQUESTS_TOTAL.labels(OperationStatus.DEADLINE_EXCEEDED).inc()
            self._logger.warning(str(exc))
            raise

        if url is None:
            URL_RESOLVE_REQUESTS_TOTAL.labels(OperationStatus.NOT_FOUND).inc()
            self._logger.warning(f"Alias not found: {alias}")
            raise URLNotFoundError(alias)

        URL_RESOLVE_REQUESTS_TOTAL.labels(OperationStatus.SUCCESS).inc()
        self._logger.debug(f"Resolved alias: {alias} -> {url}")
        return url

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    async def _save_generated(self, url: str) -> str:
        for attempt in range(1, self._max_attempts + 1):
            candidate = self._generator.generate()
            try:
                await self._insert(url, candidate)
            except AliasExistsError:
                ALIAS_COLLISIONS_TOTAL.inc()
                self._logger.debug(f"Generated alias collided: {candidate} (attempt {attempt}/{self._max_attempts})")
                continue
            return candidate
        raise AliasSpaceExhaustedError(self._max_attempts)

    async def _insert(self, url: str, alias: str) -> None:
        try:
            async with self._sessions() as session:
                session.add(URL(alias=alias, url=url))
                await session.commit()
        except IntegrityError as exc:
            # alias is the only unique column, and save_url rejects an empty url
            raise AliasExistsError(alias) from exc
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"insert failed: {exc}") from exc

    async def _select(self, alias: str) -> Optional[str]:
        try:
            async with self._sessions() as session:
                result = await session.execute(select(URL.url).where(URL.alias == alias))
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"select failed: {exc}") from exc

    @staticmethod
    @asynccontextmanager
    async def _deadline(timeout: Optional[float], operation: str) -> AsyncIterator[None]:
        scope = asyncio.timeout(timeout)
        try:
            async with scope:
                yield
        except TimeoutError as exc:
            if scope.expired():
                raise DeadlineExceededError(operation, timeout) from exc
            raise
