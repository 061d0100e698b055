import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import (
    build_conninfo,
    close_history_pool,
    history_connection,
    open_history_pool,
)

_TEST_PHONE_PREFIX = "itest-"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "chatbot_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS history (
                    id BIGSERIAL PRIMARY KEY,
                    ref TEXT NOT NULL DEFAULT '',
                    keyword TEXT NOT NULL DEFAULT '',
                    answer TEXT NOT NULL DEFAULT '',
                    ref_serialize TEXT NOT NULL DEFAULT '',
                    phone TEXT NOT NULL,
                    options JSONB NOT NULL DEFAULT '{}'::jsonb,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
                )
                """
            )
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests")
    open_history_pool(test_settings)
    try:
        yield
    finally:
        close_history_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with history_connection() as conn:
        yield conn


@pytest.fixture
def test_phone(integration_pool: None) -> Generator[str, None, None]:
    phone = f"{_TEST_PHONE_PREFIX}{os.getpid()}"
    yield phone
    with history_connection() as conn:
        conn.execute("DELETE FROM history WHERE phone = %s", (phone,))
