"""
Main entrypoint for the Article Management System API.

This module assembles the FastAPI application: it sets up logging,
wires the sheet store, mailer and services together, mounts the
versioned routes and starts the periodic maintenance task.  The app is
instantiated at import time as ``app`` so it can be served with::

    uvicorn ams_api.app.main:app --reload

``create_app`` accepts an alternative store, mailer and settings,
which is how tests run the API against an in-memory store.
"""

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.router import router as v1_router
from .core.config import Settings, settings
from .core.db import SheetStore, SQLiteSheetStore, get_database_path
from .core.logging_config import setup_logging
from .services.ams_service import AMSService
from .services.auth_service import AuthService
from .services.email_service import EmailService

logger = logging.getLogger(__name__)


async def run_scheduled_tasks(ams: AMSService, interval: float) -> None:
    """Run ``AMSService.do_scheduled_tasks`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        result = await ams.do_scheduled_tasks()
        if not result.ok:
            logger.error("Scheduled tasks failed: %s", result.details)


def create_app(
    store: Optional[SheetStore] = None,
    mailer=None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[SheetStore]
        Record store.  Defaults to the SQLite store at
        ``config.database_url``.
    mailer
        Anything with a ``send(notification)`` method.  Defaults to
        ``EmailService``.
    config : Optional[Settings]
        Settings to use instead of the module-level ``settings``.
    """
    config = config or settings
    # Logging first so that everything below can log.
    setup_logging(config.log_level, config.log_file or None)

    store = store if store is not None else SQLiteSheetStore(get_database_path(config.database_url))
    mailer = mailer if mailer is not None else EmailService(config)

    app = FastAPI(title=config.project_name, version=config.api_version, debug=config.debug)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )
    app.state.store = store
    app.state.ams = AMSService(store, mailer, AuthService(store, mailer, config))
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        if isinstance(store, SQLiteSheetStore):
            store.init_db()
        app.state.scheduler = asyncio.create_task(
            run_scheduled_tasks(app.state.ams, config.cleanup_interval_seconds)
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        task = getattr(app.state, "scheduler", None)
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    return app


app = create_app()
