from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

DEFAULT_POOL_SIZE = 5


def database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def _pool_size() -> int:
    raw = os.getenv("DATABASE_POOL_SIZE")
    if not raw:
        return DEFAULT_POOL_SIZE
    try:
        return max(1, int(raw))
    except ValueError as exc:
        raise RuntimeError(f"DATABASE_POOL_SIZE must be an integer, got {raw!r}") from exc


@lru_cache(maxsize=8)
def _build_engine(url: str, connect_timeout: int, pool_size: int) -> Engine:
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=pool_size,
        echo=os.getenv("SQL_ECHO", "").lower() in {"1", "true", "yes"},
        connect_args={"connect_timeout": connect_timeout},
    )


def get_engine(timeout_seconds: float = 1.0) -> Engine:
    connect_timeout = max(1, int(timeout_seconds))
    return _build_engine(database_url(), connect_timeout, _pool_size())


def ping_database(timeout_seconds: float = 1.0) -> bool:
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
