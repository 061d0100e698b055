from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from app.config.settings import Settings
from app.logging.logger import Log

_history_pool: ConnectionPool | None = None
_checkout_timeout: float = 5.0


def build_conninfo(settings: Settings) -> str:
    """libpq connection string for the history database."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def open_history_pool(settings: Settings, *, max_size: int = 5) -> None:
    """Open the process-wide pool. Connections are established lazily in the background."""
    global _history_pool, _checkout_timeout  # noqa: PLW0603
    if _history_pool is not None:
        return
    _checkout_timeout = settings.db_pool_timeout_seconds
    _history_pool = ConnectionPool(
        build_conninfo(settings),
        min_size=1,
        max_size=max_size,
        timeout=settings.db_pool_timeout_seconds,
        open=True,
    )
    Log.info(f"History pool opened for {settings.db_host}:{settings.db_port}/{settings.db_database}")


def close_history_pool() -> None:
    global _history_pool  # noqa: PLW0603
    if _history_pool is None:
        return
    _history_pool.close()
    _history_pool = None


@contextmanager
def history_connection() -> Iterator[psycopg.Connection[Any]]:
    """Borrow a pooled connection. The pool commits on clean exit and rolls back on error.

    Raises psycopg_pool.PoolTimeout when no connection is available within
    DB_POOL_TIMEOUT_SECONDS, e.g. while the database is down.
    """
    if _history_pool is None:
        raise RuntimeError("History pool is not open. Call open_history_pool() first.")
    with _history_pool.connection(timeout=_checkout_timeout) as conn:
        yield conn
