"""
Configuration management for fast_insert.

This module provides environment-based configuration using Pydantic BaseSettings,
so that bulk-load defaults (batch size, payload layout, binary encoding) and the
MySQL connection parameters can be tuned per deployment without code changes.

Environment variables are read with the FAST_INSERT_ prefix, optionally from a
.env file (override the location with FAST_INSERT_ENV_FILE).
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("FAST_INSERT_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class MySQLSettings:
    """
    MySQL settings compatibility layer for unified URL retrieval.

    Wraps the individual connection parameters and renders a SQLAlchemy-style
    URL with the ``local_infile`` flag that LOAD DATA LOCAL INFILE requires.
    """

    def __init__(
        self,
        host: str,
        port: int = 3306,
        user: str = "",
        password: str = "",
        database: str = "",
        uri: Optional[str] = None,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.uri = uri

    def get_connection_string(self) -> str:
        """
        Get the MySQL connection URL.

        Returns:
            ``mysql+pymysql://`` URL (the explicit URI wins when configured)
        """
        if self.uri:
            return self.uri
        return (
            f"mysql+pymysql://{self.user}:{self.password}@{self.host}:{self.port}"
            f"/{self.database}?local_infile=1"
        )


class Settings(BaseSettings):
    """
    Bulk-load settings with environment variable support.

    Fields without an explicit alias are read with the FAST_INSERT_ prefix,
    for example FAST_INSERT_BATCH_SIZE overrides ``batch_size``.
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "FAST_INSERT_LOG_LEVEL"),
        description="Logging level (uppercase)",
    )
    log_to_file: bool = Field(
        default=False,
        validation_alias=AliasChoices("LOG_TO_FILE", "FAST_INSERT_LOG_TO_FILE"),
        description="Also write logs to a daily rotated file",
    )
    log_file_dir: str = Field(
        default="logs",
        validation_alias=AliasChoices("LOG_FILE_DIR", "FAST_INSERT_LOG_FILE_DIR"),
        description="Directory for log files",
    )

    # Load defaults
    batch_size: Optional[int] = Field(
        default=None,
        description="Records per LOAD DATA statement (None = single batch)",
    )
    binary_encoding: Literal["hex", "escaped"] = Field(
        default="hex",
        description="How bytes fields are written into the payload",
    )
    field_delimiter: str = Field(
        default=";;", description="Field terminator used in payload files"
    )
    line_terminator: str = Field(
        default=os.linesep, description="Line terminator used in payload files"
    )
    escape_char: str = Field(
        default="\\", description="Escape character used in payload files"
    )
    temp_dir: Optional[str] = Field(
        default=None,
        description="Directory for payload files (None = system temp dir)",
    )
    commit_per_batch: bool = Field(
        default=True, description="Commit the connection after every batch"
    )

    # MySQL connection parameters
    mysql_host: str = Field(default="localhost", description="MySQL host")
    mysql_port: int = Field(default=3306, description="MySQL port")
    mysql_user: str = Field(default="root", description="MySQL user")
    mysql_password: str = Field(default="", description="MySQL password")
    mysql_database: str = Field(default="tests", description="MySQL database")
    mysql_uri: Optional[str] = Field(
        default=None,
        description="Complete mysql+pymysql:// URL (overrides the parts above)",
        validation_alias=AliasChoices("FAST_INSERT_MYSQL__URI", "FAST_INSERT_MYSQL_URI"),
    )

    @field_validator("batch_size")
    @classmethod
    def _positive_batch_size(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("batch_size must be a positive integer")
        return value

    @field_validator("field_delimiter", "line_terminator", "escape_char")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("payload delimiters must not be empty")
        return value

    @property
    def mysql(self) -> MySQLSettings:
        """
        Get MySQL settings compatibility wrapper.

        Returns:
            MySQLSettings instance assembled from individual configuration fields
        """
        return MySQLSettings(
            host=self.mysql_host,
            port=self.mysql_port,
            user=self.mysql_user,
            password=self.mysql_password,
            database=self.mysql_database,
            uri=self.mysql_uri,
        )

    def get_mysql_connection_string(self) -> str:
        """Get the MySQL URL, preferring the complete URI when present."""
        return self.mysql.get_connection_string()

    model_config = SettingsConfigDict(
        env_prefix="FAST_INSERT_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded once and reused across
    the application lifecycle.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
