"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for listings and the reference data
the matching engine reads, plus conversion methods between ORM models and
domain models. Timestamps are stored as ISO 8601 strings and decimals as
their exact text form, since SQLite has no native type for either.
"""

import json
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from marketmatch.domain.models import GeoPoint, Listing, ListingInsight, UserProfile
from marketmatch.utils.decimals import to_decimal
from marketmatch.utils.timestamps import format_timestamp, parse_iso_datetime

logger = logging.getLogger(__name__)

Base = declarative_base()


class ListingModel(Base):
    """ORM model for listings table."""

    __tablename__ = "listings"

    listing_id = Column(String(64), primary_key=True, nullable=False)
    listing_type = Column(String(16), nullable=False)
    status = Column(String(32), nullable=False)
    category = Column(String(255), nullable=True)
    sub_category = Column(String(255), nullable=True)
    title = Column(Text, nullable=True)
    description = Column(Text, nullable=True)

    # Decimals stored as text to keep exact values
    price_min = Column(String(40), nullable=True)
    price_max = Column(String(40), nullable=True)
    delivery_range = Column(String(40), nullable=True)

    geo_point_id = Column(String(64), nullable=True)
    publisher_id = Column(String(64), nullable=True)
    created_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_listings_candidates", "listing_type", "status", "category"),
        Index("idx_listings_publisher", "publisher_id"),
    )

    def to_domain(self) -> Listing:
        """Convert ORM model to domain model."""
        return Listing(
            listing_id=self.listing_id,
            listing_type=self.listing_type,
            status=self.status,
            category=self.category,
            sub_category=self.sub_category,
            title=self.title,
            description=self.description,
            price_min=_parse_decimal(self.price_min),
            price_max=_parse_decimal(self.price_max),
            delivery_range=_parse_decimal(self.delivery_range),
            geo_point_id=self.geo_point_id,
            publisher_id=self.publisher_id,
            created_at=parse_iso_datetime(self.created_at),
        )

    def update_from_domain(self, listing: Listing) -> None:
        """Copy all mutable columns from a domain model."""
        self.listing_type = listing.listing_type.value
        self.status = listing.status
        self.category = listing.category
        self.sub_category = listing.sub_category
        self.title = listing.title
        self.description = listing.description
        self.price_min = _format_decimal(listing.price_min)
        self.price_max = _format_decimal(listing.price_max)
        self.delivery_range = _format_decimal(listing.delivery_range)
        self.geo_point_id = listing.geo_point_id
        self.publisher_id = listing.publisher_id
        self.created_at = format_timestamp(listing.created_at)

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingModel":
        """Create ORM model from domain model."""
        model = cls(listing_id=listing.listing_id)
        model.update_from_domain(listing)
        return model


class ListingTagModel(Base):
    """ORM model for the listing/tag join table."""

    __tablename__ = "listing_tags"

    listing_id = Column(String(64), primary_key=True, nullable=False)
    tag_id = Column(String(64), primary_key=True, nullable=False)


class GeoPointModel(Base):
    """ORM model for geo_points table."""

    __tablename__ = "geo_points"

    geo_point_id = Column(String(64), primary_key=True, nullable=False)
    latitude = Column(String(40), nullable=False)
    longitude = Column(String(40), nullable=False)

    def to_domain(self) -> GeoPoint:
        """Convert ORM model to domain model."""
        return GeoPoint(
            geo_point_id=self.geo_point_id,
            latitude=_parse_decimal(self.latitude),
            longitude=_parse_decimal(self.longitude),
        )

    @classmethod
    def from_domain(cls, geo_point: GeoPoint) -> "GeoPointModel":
        """Create ORM model from domain model."""
        return cls(
            geo_point_id=geo_point.geo_point_id,
            latitude=_format_decimal(geo_point.latitude),
            longitude=_format_decimal(geo_point.longitude),
        )


class UserProfileModel(Base):
    """ORM model for user_profiles table."""

    __tablename__ = "user_profiles"

    party_id = Column(String(64), primary_key=True, nullable=False)
    preferred_categories = Column(Text, nullable=True)
    credit_score = Column(String(40), nullable=True)
    total_orders = Column(Integer, nullable=True)

    def to_domain(self) -> UserProfile:
        """Convert ORM model to domain model."""
        return UserProfile(
            party_id=self.party_id,
            preferred_categories=self.preferred_categories,
            credit_score=_parse_decimal(self.credit_score),
            total_orders=self.total_orders,
        )

    @classmethod
    def from_domain(cls, profile: UserProfile) -> "UserProfileModel":
        """Create ORM model from domain model."""
        return cls(
            party_id=profile.party_id,
            preferred_categories=profile.preferred_categories,
            credit_score=_format_decimal(profile.credit_score),
            total_orders=profile.total_orders,
        )


class ListingInsightModel(Base):
    """ORM model for listing_insights table.

    Metadata is stored as raw JSON text; the domain model tolerates text that
    does not parse.
    """

    __tablename__ = "listing_insights"

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_id = Column(String(64), nullable=False)
    summary = Column(Text, nullable=True)
    metadata_json = Column(Text, nullable=True)

    __table_args__ = (Index("idx_insights_listing", "listing_id"),)

    def to_domain(self) -> ListingInsight:
        """Convert ORM model to domain model."""
        return ListingInsight(
            insight_id=str(self.id) if self.id is not None else None,
            listing_id=self.listing_id,
            summary=self.summary,
            metadata=self.metadata_json,
        )

    @classmethod
    def from_domain(cls, insight: ListingInsight) -> "ListingInsightModel":
        """Create ORM model from domain model (the id is assigned on insert)."""
        return cls(
            listing_id=insight.listing_id,
            summary=insight.summary,
            metadata_json=json.dumps(insight.metadata, ensure_ascii=False, default=str)
            if insight.metadata
            else None,
        )


def _format_decimal(value: Optional[Decimal]) -> Optional[str]:
    """Format a Decimal for text storage."""
    return str(value) if value is not None else None


def _parse_decimal(value: Optional[str]) -> Optional[Decimal]:
    """Parse a stored decimal, treating empty or invalid text as NULL."""
    if value is None or value == "":
        return None
    return to_decimal(value)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
