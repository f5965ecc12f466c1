"""Persistence layer for listings and matching reference data.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ListingRepository: listing lookup and candidate search
    - TagRepository: listing tag sets
    - GeoPointRepository: coordinates
    - UserProfileRepository: publisher preferences and reputation
    - InsightRepository: listing insights

    # Exceptions
    - PersistenceError, DatabaseConnectionError, DataIntegrityError

Example usage:
    >>> from marketmatch.persistence import init_database, get_session, ListingRepository
    >>> init_database("sqlite:///./data/marketplace.db")
    >>> with get_session() as session:
    ...     listing = ListingRepository(session).get_by_id("L-1001")
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
)
from .repositories import (
    GeoPointRepository,
    InsightRepository,
    ListingRepository,
    TagRepository,
    UserProfileRepository,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "ListingRepository",
    "TagRepository",
    "GeoPointRepository",
    "UserProfileRepository",
    "InsightRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]
