"""Test helper utilities for marketplace matching tests."""

from .fakes import (
    FakeClock,
    FakeGeoPointReader,
    FakeInsightReader,
    FakeListingReader,
    FakeTagReader,
    FakeUserProfileReader,
    make_repositories,
)
from .factories import (
    FIXED_NOW,
    make_geo_point,
    make_insight,
    make_listing,
    make_user_profile,
    write_config,
)

__all__ = [
    "FakeClock",
    "FakeGeoPointReader",
    "FakeInsightReader",
    "FakeListingReader",
    "FakeTagReader",
    "FakeUserProfileReader",
    "make_repositories",
    "FIXED_NOW",
    "make_geo_point",
    "make_insight",
    "make_listing",
    "make_user_profile",
    "write_config",
]
