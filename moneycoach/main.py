import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .db.store import SqliteStore, Store
from .routers import coach, expenses, health, profile, stats, ui
from .services.coach import CoachClient, CoachDesk


def create_app(
    settings_override: Settings | None = None,
    store: Optional[Store] = None,
    coach_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    store: inject a Store (e.g., MemoryStore) instead of the SQLite file.
    coach_transport: httpx transport for the coach endpoint (tests use
    httpx.MockTransport).
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    if store is None:
        try:
            store = SqliteStore(settings.db_path)  # type: ignore[arg-type]
        except Exception:
            # Failing to open storage is fatal; re-raise after logging
            logging.getLogger("moneycoach").exception("failed to open store on startup")
            raise

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.store = store
    app.state.coach_desk = CoachDesk(CoachClient(settings, transport=coach_transport))

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(profile.router)
    app.include_router(expenses.router)
    app.include_router(stats.router)
    app.include_router(coach.router)
    app.include_router(ui.router)

    return app


app = create_app()
