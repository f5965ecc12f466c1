"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from marketmatch.domain.models import (
    DEFAULT_DELIVERY_RANGE_KM,
    GeoPoint,
    Listing,
    ListingInsight,
    ListingType,
    UserProfile,
)


class TestListingType:
    """Tests for ListingType."""

    def test_opposite(self):
        assert ListingType.SUPPLY.opposite() is ListingType.DEMAND
        assert ListingType.DEMAND.opposite() is ListingType.SUPPLY

    def test_parsed_from_string(self):
        assert ListingType("SUPPLY") is ListingType.SUPPLY


class TestListing:
    """Tests for Listing model."""

    def test_minimal_listing(self):
        listing = Listing(listing_id="L-1", listing_type="DEMAND")

        assert listing.listing_type is ListingType.DEMAND
        assert listing.status == "ACTIVE"
        assert listing.category is None
        assert listing.created_at is None

    def test_empty_listing_id_raises_error(self):
        with pytest.raises(ValidationError):
            Listing(listing_id="   ", listing_type="SUPPLY")

    def test_unknown_listing_type_raises_error(self):
        with pytest.raises(ValidationError):
            Listing(listing_id="L-1", listing_type="BARTER")

    def test_blank_text_fields_become_none(self):
        listing = Listing(listing_id=" L-1 ", listing_type="SUPPLY", category="  ", title=" 展台 ")

        assert listing.listing_id == "L-1"
        assert listing.category is None
        assert listing.title == "展台"

    def test_decimals_from_strings(self):
        listing = Listing(listing_id="L-1", listing_type="SUPPLY", price_min="199.90")

        assert listing.price_min == Decimal("199.90")

    def test_naive_created_at_treated_as_utc(self):
        listing = Listing(listing_id="L-1", listing_type="SUPPLY", created_at=datetime(2026, 10, 1, 8, 0))

        assert listing.created_at.tzinfo == timezone.utc

    def test_created_at_converted_to_utc(self):
        shanghai = timezone(timedelta(hours=8))
        listing = Listing(
            listing_id="L-1", listing_type="SUPPLY", created_at=datetime(2026, 10, 1, 16, 0, tzinfo=shanghai)
        )

        assert listing.created_at == datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)

    def test_effective_delivery_range(self):
        assert Listing(listing_id="L-1", listing_type="SUPPLY").effective_delivery_range == DEFAULT_DELIVERY_RANGE_KM
        ranged = Listing(listing_id="L-1", listing_type="SUPPLY", delivery_range=Decimal("12"))
        assert ranged.effective_delivery_range == Decimal("12")

    def test_delivery_range_must_be_positive(self):
        with pytest.raises(ValidationError):
            Listing(listing_id="L-1", listing_type="SUPPLY", delivery_range=Decimal("0"))

    def test_listing_is_frozen(self):
        listing = Listing(listing_id="L-1", listing_type="SUPPLY")

        with pytest.raises(ValidationError):
            listing.title = "changed"


class TestGeoPoint:
    """Tests for GeoPoint model."""

    def test_valid_point(self):
        point = GeoPoint(geo_point_id="G-1", latitude="31.2304", longitude="121.4737")

        assert point.latitude == Decimal("31.2304")

    @pytest.mark.parametrize("latitude,longitude", [("90.1", "0"), ("0", "-180.5")])
    def test_out_of_range_raises_error(self, latitude, longitude):
        with pytest.raises(ValidationError):
            GeoPoint(geo_point_id="G-1", latitude=latitude, longitude=longitude)


class TestUserProfile:
    """Tests for UserProfile model."""

    def test_prefers_category_token(self):
        profile = UserProfile(party_id="P-1", preferred_categories="exhibition,lighting")

        assert profile.prefers("exhibition")
        assert profile.prefers("light")
        assert not profile.prefers("catering")

    def test_prefers_without_data(self):
        assert not UserProfile(party_id="P-1").prefers("exhibition")
        assert not UserProfile(party_id="P-1", preferred_categories="exhibition").prefers(None)

    def test_negative_order_count_raises_error(self):
        with pytest.raises(ValidationError):
            UserProfile(party_id="P-1", total_orders=-1)


class TestListingInsight:
    """Tests for ListingInsight metadata parsing."""

    def test_mapping_metadata(self):
        insight = ListingInsight(listing_id="L-1", metadata={"estimatedArea": 100})

        assert insight.metadata == {"estimatedArea": 100}

    def test_json_text_metadata(self):
        insight = ListingInsight(listing_id="L-1", metadata='{"projectType": "RENOVATION"}')

        assert insight.metadata == {"projectType": "RENOVATION"}

    @pytest.mark.parametrize("raw", [None, "", "   ", "{broken", "[1, 2]", "42", 42])
    def test_unusable_metadata_becomes_empty(self, raw):
        assert ListingInsight(listing_id="L-1", metadata=raw).metadata == {}
