from __future__ import annotations

import logging
import os
import threading
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def _engine_options(database_url: str, connect_timeout: int) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        # pysqlite waits on a locked file for `timeout` seconds instead of failing at once.
        return {"connect_args": {"timeout": connect_timeout, "check_same_thread": False}}
    options: dict[str, Any] = {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}
    if database_url.startswith("postgresql"):
        options["connect_args"] = {"connect_timeout": connect_timeout}
    return options


_engines: dict[tuple[str, int], Engine] = {}
_engines_lock = threading.Lock()


def get_engine(timeout_seconds: float = 1.0) -> Engine:
    database_url = _database_url()
    key = (database_url, max(1, int(timeout_seconds)))
    with _engines_lock:
        engine = _engines.get(key)
        if engine is None:
            engine = create_engine(database_url, **_engine_options(*key))
            _engines[key] = engine
    return engine


def reset_engines() -> None:
    """Dispose cached engines so the next call picks up a changed DATABASE_URL."""
    with _engines_lock:
        engines = list(_engines.values())
        _engines.clear()
    for engine in engines:
        engine.dispose()


def ping_database(timeout_seconds: float = 1.0) -> bool:
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
    except (SQLAlchemyError, RuntimeError):
        logger.warning("database_ping_failed", exc_info=True)
        return False
    return True
