"""Application factory that wires settings, store, directory and HTTP app."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .api import create_app as create_api_app
from .config import Settings, load_settings
from .database import Database
from .service import UserDirectory
from .store import UserStore

logger = logging.getLogger("accounts.application")


def build_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Using accounts database at %s", settings.database_path)
    return database


def create_application(
    *,
    settings: Optional[Settings] = None,
    store: Optional[UserStore] = None,
) -> FastAPI:
    """Create the ASGI application.

    ``store`` takes precedence over the database configured in ``settings``,
    which lets callers run the API on top of an in-memory store.
    """

    if store is None:
        store = build_database(settings or load_settings())
    directory = UserDirectory(store)
    return create_api_app(directory=directory)


__all__ = ["build_database", "create_application"]
