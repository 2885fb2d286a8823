"""Unit tests for structured logging.

Tests cover:
- get_logger returns a structlog BoundLogger
- JSON output with ISO timestamps, level and logger name
- Sanitization of passwords and connection URLs
- Context binding
"""

import json
import logging
from datetime import date
from logging.handlers import TimedRotatingFileHandler

import pytest

from fast_insert.config.settings import Settings
from fast_insert.utils.logging import (
    REDACTED_VALUE,
    bind_context,
    configure_logging,
    get_logger,
    log_file_path,
    sanitize_for_logging,
)


@pytest.mark.unit
def test_get_logger_returns_bound_logger() -> None:
    logger = get_logger("test_module")

    assert hasattr(logger, "bind")
    assert hasattr(logger, "info")
    assert hasattr(logger, "error")


@pytest.mark.unit
def test_sanitize_redacts_password() -> None:
    sanitized = sanitize_for_logging({"mysql_password": "secret123", "user": "admin"})

    assert sanitized["mysql_password"] == REDACTED_VALUE
    assert sanitized["user"] == "admin"


@pytest.mark.unit
def test_sanitize_redacts_connection_urls() -> None:
    data = {
        "mysql_uri": "mysql+pymysql://root:pw@localhost/tests",
        "url": "mysql://root:pw@localhost/tests",
        "database": "tests",
    }
    sanitized = sanitize_for_logging(data)

    assert sanitized["mysql_uri"] == REDACTED_VALUE
    assert sanitized["url"] == REDACTED_VALUE
    assert sanitized["database"] == "tests"


@pytest.mark.unit
def test_sanitize_handles_nested_dicts() -> None:
    sanitized = sanitize_for_logging({"auth": {"token": "abc", "user": "u"}})

    assert sanitized["auth"]["token"] == REDACTED_VALUE
    assert sanitized["auth"]["user"] == "u"


@pytest.mark.unit
def test_sanitize_case_insensitive() -> None:
    sanitized = sanitize_for_logging({"PASSWORD": "x", "Secret": "y"})

    assert sanitized["PASSWORD"] == REDACTED_VALUE
    assert sanitized["Secret"] == REDACTED_VALUE


@pytest.mark.unit
def test_json_output_structure(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("fast_insert.test").info("fast_insert.load.started", table="orders")

    log_data = json.loads(caplog.records[-1].message)
    assert log_data["event"] == "fast_insert.load.started"
    assert log_data["level"] == "info"
    assert log_data["logger"] == "fast_insert.test"
    assert log_data["table"] == "orders"
    assert "T" in log_data["timestamp"]


@pytest.mark.unit
def test_sanitization_in_logged_output(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("fast_insert.test").info(
        "fast_insert.connection.connecting", host="db", password="pw"
    )

    log_data = json.loads(caplog.records[-1].message)
    assert log_data["password"] == REDACTED_VALUE
    assert log_data["host"] == "db"


@pytest.mark.unit
def test_context_binding_persists(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    logger = bind_context(table="orders", execution_id="exec_123")
    logger.info("fast_insert.batch.loaded", batch=1)
    logger.info("fast_insert.batch.loaded", batch=2)

    records = [json.loads(record.message) for record in caplog.records[-2:]]
    assert [r["batch"] for r in records] == [1, 2]
    assert all(r["execution_id"] == "exec_123" for r in records)
    assert all(r["table"] == "orders" for r in records)


@pytest.mark.unit
def test_log_file_path_is_dated(tmp_path) -> None:
    path = log_file_path(str(tmp_path / "logs"), today=date(2024, 5, 6))

    assert path == tmp_path / "logs" / "fast-insert-20240506.log"
    assert path.parent.is_dir()


@pytest.mark.unit
def test_file_handler_installed_when_enabled(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOG_TO_FILE", "true")
    monkeypatch.setenv("LOG_FILE_DIR", str(tmp_path))
    try:
        configure_logging(Settings(_env_file=None))
        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, TimedRotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename.startswith(str(tmp_path))
    finally:
        monkeypatch.setenv("LOG_TO_FILE", "false")
        configure_logging(Settings(_env_file=None))


@pytest.mark.unit
def test_reconfiguration_replaces_handlers() -> None:
    before = len(logging.getLogger().handlers)
    configure_logging(Settings(_env_file=None))
    configure_logging(Settings(_env_file=None))
    assert len(logging.getLogger().handlers) == before
