"""
Main entrypoint for the Clean Slate API.

This module assembles the FastAPI application, sets up logging, creates
the marketplace store and includes the versioned routers.  ``app`` is
instantiated at import time so that it can be served directly::

    uvicorn cleanslate_api.app.main:app --reload
"""

from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.logging_config import setup_logging
from .core.store import MarketplaceStore, init_store


def create_app(store: Optional[MarketplaceStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    ``store`` lets callers (tests in particular) inject a prepared
    store; otherwise a fresh one is built, seeded with the training
    catalog and, when ``settings.seed_demo_data`` is set, demo records.
    """
    # Logging first so that the store seeding below is logged.
    setup_logging(settings)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.state.store = store if store is not None else init_store(seed=settings.seed_demo_data)

    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
