"""FastAPI application entry point for the URL shortener service.

Application Lifecycle Diagram
=============================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ create_app()│
    │ + routes    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ startup:    │
    │ settings,   │
    │ logger,     │
    │ Database,   │
    │ URLStorage  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ shutdown:   │
    │ db.close()  │
    └─────────────┘

How to Use
===========
**Step 1 — Configure**::
    export HTTP_PASSWORD=change-me
    export DATABASE_URL=sqlite+aiosqlite:///./storage.db

**Step 2 — Run with uvicorn**::
    uvicorn shortener.main:app --host 0.0.0.0 --port 8082

**Step 3 — Make API calls**::
    curl -u admin:change-me -X POST http://localhost:8082/url \
         -H "Content-Type: application/json" \
         -d '{"url": "https://example.com", "alias": "ex1"}'

    curl -i http://localhost:8082/ex1

Key Behaviours
===============
- Settings are resolved when the lifespan starts, not at import time.
- Exactly one Database and one URLStorage exist per application; both
  live on app.state and are shared by all requests.
- The database is closed once on shutdown.
- HTTP request counts and latencies are recorded per route and exposed on
  /metrics next to the store counters.
"""

__all__ = ["app", "create_app"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from shortener.alias import AliasGenerator
from shortener.config import Settings, get_settings
from shortener.database import Database
from shortener.logger import setup_logger
from shortener.routes import router
from shortener.storage import URLStorage


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build a FastAPI app with its own database handle and store.

    Args:
        settings: Explicit settings (tests); read from the environment if omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        resolved = settings or get_settings()
        logger = setup_logger(resolved.APP_ENV)
        logger.info(f"Starting {resolved.APP_NAME} (env={resolved.APP_ENV.value})")

        database = Database(resolved.DATABASE_URL, echo=resolved.DATABASE_ECHO)
        await database.connect()

        app.state.settings = resolved
        app.state.logger = logger
        app.state.database = database
        app.state.storage = URLStorage(
            database.sessions,
            generator=AliasGenerator(length=resolved.ALIAS_LENGTH),
            max_attempts=resolved.ALIAS_MAX_ATTEMPTS,
            logger=logger.getChild("storage"),
        )
        try:
            yield
        finally:
            # Shutdown
            await database.close()
            logger.info("Database closed")

    app = FastAPI(
        title="url-shortener",
        version="1.0.0",
        description="Maps long URLs to short unique aliases",
        lifespan=lifespan,
    )

    # /metrics must be registered ahead of the /{alias} catch-all.
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=False,
        should_respect_env_var=False,
    ).instrument(app).expose(app)

    app.include_router(router)
    return app


app = create_app()
