"""Read interfaces the matching engine depends on.

Any object with the right methods can be injected; the SQLAlchemy
repositories in marketmatch.persistence satisfy these protocols, and tests
also use plain in-memory fakes.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Set, runtime_checkable

from sqlalchemy.orm import Session

from marketmatch.domain.models import GeoPoint, Listing, ListingInsight, ListingType, UserProfile


@runtime_checkable
class ListingReader(Protocol):
    """Listing lookup by id and candidate search."""

    def get_by_id(self, listing_id: str) -> Optional[Listing]:
        ...

    def find_active(
        self, listing_type: ListingType, category: Optional[str], status: str = ...
    ) -> List[Listing]:
        ...


@runtime_checkable
class TagReader(Protocol):
    """Tag-id set lookup by listing id."""

    def get_tag_ids(self, listing_id: str) -> Set[str]:
        ...


@runtime_checkable
class GeoPointReader(Protocol):
    """Geo point lookup by id."""

    def get_by_id(self, geo_point_id: str) -> Optional[GeoPoint]:
        ...


@runtime_checkable
class UserProfileReader(Protocol):
    """User profile lookup by party id."""

    def get_by_party_id(self, party_id: str) -> Optional[UserProfile]:
        ...


@runtime_checkable
class InsightReader(Protocol):
    """Insight list lookup by listing id."""

    def list_by_listing(self, listing_id: str) -> List[ListingInsight]:
        ...


@dataclass(frozen=True)
class MatchingRepositories:
    """Bundle of the readers used by SmartMatchingEngine."""

    listings: ListingReader
    tags: TagReader
    geo_points: GeoPointReader
    profiles: UserProfileReader
    insights: InsightReader

    @classmethod
    def from_session(cls, session: Session) -> "MatchingRepositories":
        """Build the SQLAlchemy-backed readers sharing one session."""
        from marketmatch.persistence.repositories import (
            GeoPointRepository,
            InsightRepository,
            ListingRepository,
            TagRepository,
            UserProfileRepository,
        )

        return cls(
            listings=ListingRepository(session),
            tags=TagRepository(session),
            geo_points=GeoPointRepository(session),
            profiles=UserProfileRepository(session),
            insights=InsightRepository(session),
        )
