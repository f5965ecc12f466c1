"""Domain models for the marketplace matching engine."""

from .models import GeoPoint, Listing, ListingInsight, ListingStatus, ListingType, UserProfile

__all__ = ["Listing", "ListingType", "ListingStatus", "GeoPoint", "UserProfile", "ListingInsight"]
