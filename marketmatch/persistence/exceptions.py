"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
every storage failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails.

    Examples:
    - Invalid or empty database URL
    - Database file not accessible
    - Driver not available
    """


class DataIntegrityError(PersistenceError):
    """Raised when a database constraint is violated."""
