"""Unit tests for environment-based configuration.

Tests verify:
- Load defaults and FAST_INSERT_ prefixed overrides
- Validation of batch size and payload delimiters
- MySQL URL assembly with the local_infile flag
- Singleton behavior of get_settings
"""

import pytest
from pydantic import ValidationError

from fast_insert.config.settings import MySQLSettings, Settings, get_settings


@pytest.mark.unit
def test_defaults():
    """Defaults load everything in one batch with hex binary fields."""
    settings = Settings(_env_file=None)

    assert settings.batch_size is None
    assert settings.binary_encoding == "hex"
    assert settings.field_delimiter == ";;"
    assert settings.escape_char == "\\"
    assert settings.commit_per_batch is True


@pytest.mark.unit
def test_prefixed_environment_overrides(monkeypatch):
    monkeypatch.setenv("FAST_INSERT_BATCH_SIZE", "500")
    monkeypatch.setenv("FAST_INSERT_FIELD_DELIMITER", "|")
    monkeypatch.setenv("FAST_INSERT_COMMIT_PER_BATCH", "false")

    settings = Settings(_env_file=None)

    assert settings.batch_size == 500
    assert settings.field_delimiter == "|"
    assert settings.commit_per_batch is False


@pytest.mark.unit
def test_log_level_alias(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    assert Settings(_env_file=None).LOG_LEVEL == "DEBUG"


@pytest.mark.unit
@pytest.mark.parametrize("value", ["0", "-1"])
def test_batch_size_must_be_positive(monkeypatch, value):
    monkeypatch.setenv("FAST_INSERT_BATCH_SIZE", value)
    with pytest.raises(ValidationError, match="batch_size"):
        Settings(_env_file=None)


@pytest.mark.unit
def test_unknown_binary_encoding_rejected(monkeypatch):
    monkeypatch.setenv("FAST_INSERT_BINARY_ENCODING", "base64")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.unit
def test_empty_delimiter_rejected(monkeypatch):
    monkeypatch.setenv("FAST_INSERT_FIELD_DELIMITER", "")
    with pytest.raises(ValidationError, match="delimiters"):
        Settings(_env_file=None)


@pytest.mark.unit
def test_mysql_connection_string_from_parts(monkeypatch):
    monkeypatch.delenv("FAST_INSERT_MYSQL_URI", raising=False)
    monkeypatch.delenv("FAST_INSERT_MYSQL__URI", raising=False)
    monkeypatch.setenv("FAST_INSERT_MYSQL_HOST", "db")
    monkeypatch.setenv("FAST_INSERT_MYSQL_PORT", "3307")
    monkeypatch.setenv("FAST_INSERT_MYSQL_USER", "loader")
    monkeypatch.setenv("FAST_INSERT_MYSQL_PASSWORD", "pw")
    monkeypatch.setenv("FAST_INSERT_MYSQL_DATABASE", "tests")

    url = Settings(_env_file=None).get_mysql_connection_string()

    assert url == "mysql+pymysql://loader:pw@db:3307/tests?local_infile=1"


@pytest.mark.unit
def test_mysql_uri_wins(monkeypatch):
    monkeypatch.setenv("FAST_INSERT_MYSQL_URI", "mysql+pymysql://u@h/tests?local_infile=1")
    settings = Settings(_env_file=None)
    assert settings.get_mysql_connection_string() == "mysql+pymysql://u@h/tests?local_infile=1"


@pytest.mark.unit
def test_mysql_settings_wrapper():
    mysql = MySQLSettings(host="h", user="u", password="p", database="d")
    assert mysql.get_connection_string() == "mysql+pymysql://u:p@h:3306/d?local_infile=1"


@pytest.mark.unit
def test_settings_singleton():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
