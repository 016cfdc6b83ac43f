from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def _connect_args(database_url: str, connect_timeout: int) -> dict[str, object]:
    backend = make_url(database_url).get_backend_name()
    if backend == "postgresql":
        return {"connect_timeout": connect_timeout}
    if backend == "sqlite":
        return {"check_same_thread": False}
    return {}


@lru_cache(maxsize=8)
def build_engine(database_url: str, connect_timeout: int = 1) -> Engine:
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=_connect_args(database_url, connect_timeout),
    )


def get_engine(timeout_seconds: float = 1.0, database_url: str | None = None) -> Engine:
    connect_timeout = max(1, int(timeout_seconds))
    return build_engine(database_url or _database_url(), connect_timeout)


def ping_database(timeout_seconds: float = 1.0, database_url: str | None = None) -> bool:
    try:
        with get_engine(timeout_seconds, database_url).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
