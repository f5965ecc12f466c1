"""Utility functions for time handling and score arithmetic."""

from .decimals import quantize, to_decimal, to_score
from .timestamps import (
    age_in_whole_hours,
    ensure_utc,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    # Timestamps
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "format_timestamp",
    "age_in_whole_hours",
    # Decimals
    "quantize",
    "to_decimal",
    "to_score",
]
