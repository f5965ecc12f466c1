"""Data access layer (repositories) for listings and reference data.

Repositories encapsulate SQLAlchemy queries and return domain models rather
than ORM models. The read methods satisfy the protocols in
marketmatch.matching.protocols; the write methods exist for data loading
and tests.
"""

import logging
from typing import Iterable, List, Optional, Set, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketmatch.domain.models import (
    GeoPoint,
    Listing,
    ListingInsight,
    ListingStatus,
    ListingType,
    UserProfile,
)

from .exceptions import DataIntegrityError, PersistenceError
from .schema import (
    GeoPointModel,
    ListingInsightModel,
    ListingModel,
    ListingTagModel,
    UserProfileModel,
)

logger = logging.getLogger(__name__)


class _SessionRepository:
    """Shared session handling for all repositories."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session


class ListingRepository(_SessionRepository):
    """Repository for listing lookups and candidate searches."""

    def get_by_id(self, listing_id: str) -> Optional[Listing]:
        """Retrieve a listing by primary key.

        Returns:
            Listing domain model if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            listing_model = self.session.get(ListingModel, listing_id)
            return listing_model.to_domain() if listing_model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve listing: {e}") from e

    def find_active(
        self,
        listing_type: Union[ListingType, str],
        category: Optional[str],
        status: str = ListingStatus.ACTIVE,
    ) -> List[Listing]:
        """Find listings of one type and status in a category.

        Results are ordered by listing id so callers see a stable order.

        Args:
            listing_type: SUPPLY or DEMAND
            category: Category token; None matches listings without a category
            status: Listing status (default ACTIVE)

        Returns:
            List of Listing domain models (empty list if none found)

        Raises:
            PersistenceError: If database error occurs
        """
        type_value = ListingType(listing_type).value
        try:
            category_clause = (
                ListingModel.category.is_(None)
                if category is None
                else ListingModel.category == category
            )
            stmt = (
                select(ListingModel)
                .where(
                    ListingModel.listing_type == type_value,
                    ListingModel.status == status,
                    category_clause,
                )
                .order_by(ListingModel.listing_id.asc())
            )
            listing_models = self.session.execute(stmt).scalars().all()
            return [listing_model.to_domain() for listing_model in listing_models]
        except SQLAlchemyError as e:
            logger.error(
                f"Error searching listings {type_value}/{status}/{category}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to search listings: {e}") from e

    def upsert(self, listing: Listing) -> Listing:
        """Insert a new listing or update an existing one.

        Raises:
            DataIntegrityError: On constraint violation
            PersistenceError: If database error occurs
        """
        try:
            existing = self.session.get(ListingModel, listing.listing_id)
            if existing is not None:
                existing.update_from_domain(listing)
                model = existing
            else:
                model = ListingModel.from_domain(listing)
                self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error upserting listing {listing.listing_id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to upsert listing due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting listing {listing.listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert listing: {e}") from e


class TagRepository(_SessionRepository):
    """Repository for the listing/tag association."""

    def get_tag_ids(self, listing_id: str) -> Set[str]:
        """Return the set of tag ids attached to a listing.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(ListingTagModel.tag_id).where(ListingTagModel.listing_id == listing_id)
            return set(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving tags for listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve tags: {e}") from e

    def add_tags(self, listing_id: str, tag_ids: Iterable[str]) -> Set[str]:
        """Attach tags to a listing, ignoring ones already attached.

        Returns:
            The full tag set of the listing after the update

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            current = self.get_tag_ids(listing_id)
            for tag_id in set(tag_ids) - current:
                self.session.add(ListingTagModel(listing_id=listing_id, tag_id=tag_id))
            self.session.flush()
            return self.get_tag_ids(listing_id)
        except SQLAlchemyError as e:
            logger.error(f"Error adding tags to listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add tags: {e}") from e


class GeoPointRepository(_SessionRepository):
    """Repository for geo point reference data."""

    def get_by_id(self, geo_point_id: str) -> Optional[GeoPoint]:
        """Retrieve a geo point by id, None if not found.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(GeoPointModel, geo_point_id)
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving geo point {geo_point_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve geo point: {e}") from e

    def upsert(self, geo_point: GeoPoint) -> GeoPoint:
        """Insert or replace a geo point.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.merge(GeoPointModel.from_domain(geo_point))
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error upserting geo point {geo_point.geo_point_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert geo point: {e}") from e


class UserProfileRepository(_SessionRepository):
    """Repository for publisher profiles."""

    def get_by_party_id(self, party_id: str) -> Optional[UserProfile]:
        """Retrieve a user profile by party id, None if not found.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(UserProfileModel, party_id)
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving profile {party_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user profile: {e}") from e

    def upsert(self, profile: UserProfile) -> UserProfile:
        """Insert or replace a user profile.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.merge(UserProfileModel.from_domain(profile))
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error upserting profile {profile.party_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert user profile: {e}") from e


class InsightRepository(_SessionRepository):
    """Repository for listing insights."""

    def list_by_listing(self, listing_id: str) -> List[ListingInsight]:
        """Return all insights of a listing in insertion order.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(ListingInsightModel)
                .where(ListingInsightModel.listing_id == listing_id)
                .order_by(ListingInsightModel.id.asc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving insights for listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve insights: {e}") from e

    def add(self, insight: ListingInsight) -> ListingInsight:
        """Store a new insight and return it with its assigned id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = ListingInsightModel.from_domain(insight)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error adding insight for listing {insight.listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add insight: {e}") from e

    def add_raw(self, listing_id: str, summary: Optional[str], metadata_json: Optional[str]) -> None:
        """Store an insight with metadata text exactly as given (may be invalid JSON).

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            self.session.add(
                ListingInsightModel(listing_id=listing_id, summary=summary, metadata_json=metadata_json)
            )
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error adding insight for listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add insight: {e}") from e
