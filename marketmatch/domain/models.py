"""Core domain models for marketplace listings and their reference data.

This module defines the data structures read by the matching engine:
- Listing: a supply or demand posting
- GeoPoint: coordinates referenced by listings
- UserProfile: publisher preferences and reputation
- ListingInsight: free-text summary plus schema-less metadata for a listing

All models are immutable from the engine's point of view; they are owned and
produced by the persistence layer (or any other repository implementation).
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from marketmatch.utils.timestamps import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_DELIVERY_RANGE_KM = Decimal("5.0")


class ListingType(str, Enum):
    """Side of the marketplace a listing is on."""

    SUPPLY = "SUPPLY"
    DEMAND = "DEMAND"

    def opposite(self) -> "ListingType":
        """Return the listing type that this type is matched against."""
        return ListingType.DEMAND if self is ListingType.SUPPLY else ListingType.SUPPLY


class ListingStatus:
    """Well-known listing status values."""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    DRAFT = "DRAFT"


class Listing(BaseModel):
    """A marketplace posting offering supply or expressing demand.

    Price bounds, delivery range, geo point, publisher and creation time are
    all optional; the engine substitutes documented fallback scores when they
    are missing.
    """

    listing_id: str = Field(..., description="Unique listing identifier")
    listing_type: ListingType = Field(..., description="SUPPLY or DEMAND")
    status: str = Field(ListingStatus.ACTIVE, description="Lifecycle status")
    category: Optional[str] = Field(None, description="Top-level category token")
    sub_category: Optional[str] = Field(None, description="Sub-category token")
    title: Optional[str] = Field(None, description="Listing title")
    description: Optional[str] = Field(None, description="Free-text description")
    price_min: Optional[Decimal] = Field(None, description="Lower price bound")
    price_max: Optional[Decimal] = Field(None, description="Upper price bound")
    delivery_range: Optional[Decimal] = Field(
        None, gt=0, description="Delivery radius in km (engine default 5.0)"
    )
    geo_point_id: Optional[str] = Field(None, description="Referenced GeoPoint id")
    publisher_id: Optional[str] = Field(None, description="Publishing party id")
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")

    @field_validator("listing_id")
    @classmethod
    def strip_listing_id(cls, v: str) -> str:
        """Reject empty identifiers."""
        if not v or not v.strip():
            raise ValueError("listing_id cannot be empty or whitespace-only")
        return v.strip()

    @field_validator(
        "category", "sub_category", "title", "description", "geo_point_id", "publisher_id"
    )
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Strip optional text fields, turning blank strings into None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)

    @property
    def effective_delivery_range(self) -> Decimal:
        """Delivery range with the 5 km default applied."""
        return self.delivery_range if self.delivery_range is not None else DEFAULT_DELIVERY_RANGE_KM

    model_config = {"frozen": True, "json_schema_extra": {"example": {
        "listing_id": "L-1001",
        "listing_type": "DEMAND",
        "status": "ACTIVE",
        "category": "exhibition",
        "title": "上海展台搭建需求",
        "description": "在上海新国际博览中心搭建100平米展台，预算20万，工期15天",
        "price_min": "150000",
        "price_max": "250000",
        "delivery_range": "20",
        "geo_point_id": "GEO-SH-1",
        "publisher_id": "P-77",
        "created_at": "2026-10-01T08:00:00Z",
    }}}


class GeoPoint(BaseModel):
    """Latitude/longitude reference data in decimal degrees."""

    geo_point_id: str = Field(..., description="Unique geo point identifier")
    latitude: Decimal = Field(..., ge=-90, le=90)
    longitude: Decimal = Field(..., ge=-180, le=180)

    model_config = {"frozen": True}


class UserProfile(BaseModel):
    """Publisher preferences and reputation signals."""

    party_id: str = Field(..., description="Party identifier")
    preferred_categories: Optional[str] = Field(
        None, description="Free text containing preferred category tokens"
    )
    credit_score: Optional[Decimal] = Field(
        None, description="Reputation score, expected (not enforced) in [0, 1]"
    )
    total_orders: Optional[int] = Field(None, ge=0, description="Completed order count")

    model_config = {"frozen": True}

    def prefers(self, category: Optional[str]) -> bool:
        """Return True if the preferred-categories text mentions category."""
        if not category or not self.preferred_categories:
            return False
        return category in self.preferred_categories


class ListingInsight(BaseModel):
    """Derived free-text summary and metadata attached to a listing.

    ``metadata`` may be given as a mapping or as JSON text. Text that does not
    parse to a JSON object yields an empty mapping, since insight metadata is
    schema-less and best-effort.
    """

    insight_id: Optional[str] = Field(None, description="Insight identifier")
    listing_id: str = Field(..., description="Listing the insight belongs to")
    summary: Optional[str] = Field(None, description="Free-text summary")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @field_validator("metadata", mode="before")
    @classmethod
    def parse_metadata(cls, v: Any) -> Dict[str, Any]:
        """Accept a mapping or JSON text; degrade anything else to {}."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return v
        if isinstance(v, (str, bytes)):
            if not v.strip():
                return {}
            try:
                parsed = json.loads(v)
            except ValueError as e:
                logger.debug(
                    f"Ignoring unparseable insight metadata: {e}",
                    extra={"event": "profile.metadata_invalid"},
                )
                return {}
            if isinstance(parsed, dict):
                return parsed
        logger.debug(
            "Ignoring insight metadata that is not an object",
            extra={"event": "profile.metadata_invalid"},
        )
        return {}
