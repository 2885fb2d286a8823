"""MySQL connectors for bulk loading."""

from .mysql_connector import (
    InformationSchemaColumnProvider,
    connect,
    opened,
    validate_connection,
)

__all__ = [
    "InformationSchemaColumnProvider",
    "connect",
    "opened",
    "validate_connection",
]
