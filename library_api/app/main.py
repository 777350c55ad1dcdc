"""
Main entrypoint for the Library Circulation API.

This module assembles the FastAPI application: it sets up logging,
builds the SQLite stores and the services on top of them, registers
the exception handlers and includes the routers.  ``create_app``
builds and configures the app, which is then instantiated at module
import time as ``app`` so it can be served with uvicorn::

    uvicorn library_api.app.main:app --reload

Tests call ``create_app`` directly to point the application at a
temporary database, a fixed clock and their own fine policy.
"""

from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Optional

from fastapi import FastAPI

from .api.handlers import register_exception_handlers
from .api.router import router
from .core.config import settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .services.catalog_service import CatalogService
from .services.circulation_service import CirculationService
from .services.patron_service import PatronService
from .store.base import FinePolicy
from .store.sqlite import (
    SQLiteBookStore,
    SQLiteCirculationStore,
    SQLitePatronStore,
    daily_rate_policy,
)


def create_app(
    database_url: Optional[str] = None,
    fine_policy: Optional[FinePolicy] = None,
    clock: Callable[[], date] = date.today,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    database_url : Optional[str]
        SQLite database path.  Defaults to ``settings.database_url``.
    fine_policy : Optional[FinePolicy]
        Computes the fine of a late return.  Defaults to a flat
        ``settings.fine_daily_rate`` per overdue day.
    clock : Callable[[], date]
        Source of the current date for returns without a date.

    Returns
    -------
    FastAPI
        A configured FastAPI instance ready to be served.
    """
    setup_logging(
        settings.log_level,
        settings.log_file or None,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    db_path = get_database_path(database_url)
    policy = fine_policy or daily_rate_policy(settings.fine_daily_rate)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Creates the database file if needed and brings the schema up to date.
        init_db(db_path)
        yield

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.catalog_service = CatalogService(SQLiteBookStore(db_path))
    app.state.patron_service = PatronService(SQLitePatronStore(db_path))
    app.state.circulation_service = CirculationService(
        SQLiteCirculationStore(policy, db_path),
        clock=clock,
    )

    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
