"""Pytest configuration for fast_insert unit and opt-in MySQL suites.

A local .env file is loaded first so FAST_INSERT_* variables (and the
FAST_INSERT_TEST_MYSQL_URI used by the integration suite) can be kept out of
the shell environment.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_ENV_FILE = Path(__file__).parent.parent / ".env"
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=False)

import os
import re
from typing import Generator
from unittest.mock import MagicMock

import pymysql
import pytest
from pymysql.constants import CLIENT

from fast_insert.config import get_settings

INTEGRATION_MARK = "integration"
MYSQL_URI_ENV = "FAST_INSERT_TEST_MYSQL_URI"


def _validate_test_database(url: str) -> bool:
    """Refuse to run destructive tests outside a test database.

    Examples:
        >>> _validate_test_database("mysql+pymysql://root@localhost/tests?local_infile=1")
        True
    """
    from sqlalchemy.engine.url import make_url

    db_name = make_url(url).database
    if not db_name or not re.search(r"(test|tmp|dev|local|sandbox)", db_name, re.IGNORECASE):
        raise RuntimeError(
            f"Refusing to run tests against non-test database: {db_name!r}. "
            "Test databases must contain one of: test, tmp, dev, local, sandbox."
        )
    return True


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip the MySQL suite unless a test server URL is configured."""
    if os.getenv(MYSQL_URI_ENV):
        return
    skip_integration = pytest.mark.skip(
        reason=f"Set {MYSQL_URI_ENV} to run tests against a MySQL server."
    )
    for item in items:
        if INTEGRATION_MARK in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop cached Settings so monkeypatched environment variables apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_connection() -> MagicMock:
    """A pymysql connection double opened with local_infile=True."""
    conn = MagicMock(spec=pymysql.connections.Connection)
    conn.client_flag = CLIENT.LOCAL_FILES
    conn.open = True
    conn.host = "localhost"
    cursor = MagicMock()
    cursor.__enter__.return_value = cursor
    cursor.__exit__.return_value = False
    cursor.execute.return_value = 0
    conn.cursor.return_value = cursor
    return conn


@pytest.fixture
def mysql_url() -> str:
    url = os.environ[MYSQL_URI_ENV]
    _validate_test_database(url)
    return url
