"""
Exception hierarchy for fast_insert.

Only problems detected by fast_insert itself are raised as these types.
Database and file system errors raised during a load reach the caller
unchanged.
"""

from typing import Dict, Optional


class FastInsertError(Exception):
    """Base exception for all fast_insert errors."""

    pass


class ConfigurationError(FastInsertError):
    """
    Raised before any I/O when the connection, options or mapping are unusable.

    Args:
        message: Error description
        table: Destination table the load was aimed at (optional)
    """

    def __init__(self, message: str, table: Optional[str] = None):
        self.table = table
        full_message = f"{message} (table='{table}')" if table else message
        super().__init__(full_message)

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Convert to structured dict for logging."""
        return {
            "error_type": type(self).__name__,
            "table": self.table,
            "message": str(self),
        }
