"""Dimension scorers for listing pairs.

Each scorer is a pure function of already-fetched inputs and returns a
ScoreOutcome whose value lies in [0, 1] with four fractional digits. Missing
inputs yield a documented constant together with a fallback reason instead
of an error.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import AbstractSet, Optional

from marketmatch.domain.models import DEFAULT_DELIVERY_RANGE_KM, GeoPoint, UserProfile
from marketmatch.utils.decimals import quantize, to_score
from marketmatch.utils.timestamps import age_in_whole_hours

from .models import ProjectProfile, ScoreOutcome

EARTH_RADIUS_KM = 6371.0

ONE = Decimal("1")
ZERO = Decimal("0")
TWO = Decimal("2")

PRICE_FALLBACK = Decimal("0.7")
FRESHNESS_FALLBACK = Decimal("0.5")
PREFERENCE_FALLBACK = Decimal("0.5")
AFFINITY_NEUTRAL = Decimal("0.5")

FRESH_WINDOW_HOURS = 48.0

PREFERENCE_BASE = Decimal("0.5")
PREFERENCE_CATEGORY_BONUS = Decimal("0.2")
PREFERENCE_CREDIT_FACTOR = Decimal("0.1")

AFFINITY_SAME_TYPE = Decimal("0.75")
AFFINITY_DIFFERENT_TYPE = Decimal("0.4")
AFFINITY_ONE_SIDED = Decimal("0.55")

# (lower bound of smaller/larger, adjustment); below the last bound: -0.05
AREA_STEPS = ((Decimal("0.9"), Decimal("0.10")), (Decimal("0.75"), Decimal("0.07")), (Decimal("0.6"), Decimal("0.04")))
AREA_PENALTY = Decimal("-0.05")
# (upper bound of diff/average, adjustment); above the last bound: -0.05
BUDGET_STEPS = ((Decimal("0.2"), Decimal("0.08")), (Decimal("0.35"), Decimal("0.05")), (Decimal("0.5"), Decimal("0.02")))
BUDGET_PENALTY = Decimal("-0.05")
# (upper bound of absolute day difference, adjustment); above: -0.03
DURATION_STEPS = ((Decimal("7"), Decimal("0.04")), (Decimal("14"), Decimal("0.02")))
DURATION_PENALTY = Decimal("-0.03")

LOCATION_EQUAL = Decimal("0.08")
LOCATION_PREFIX = Decimal("0.04")
LOCATION_PENALTY = Decimal("-0.04")
SHARED_STYLE_BONUS = Decimal("0.03")
SHARED_MATERIAL_BONUS = Decimal("0.02")


def _clamp(value: Decimal, lower: Decimal = ZERO, upper: Decimal = ONE) -> Decimal:
    return max(lower, min(upper, value))


def tag_similarity(tags_a: AbstractSet[str], tags_b: AbstractSet[str]) -> ScoreOutcome:
    """Jaccard index of two tag-id sets.

    Example:
        >>> tag_similarity({"X", "Y"}, {"Y", "Z"}).value
        Decimal('0.3333')
    """
    if not tags_a or not tags_b:
        return ScoreOutcome.fallback(ZERO, "missing_tags")

    intersection = len(set(tags_a) & set(tags_b))
    union = len(set(tags_a) | set(tags_b))
    return ScoreOutcome.computed(to_score(Decimal(intersection) / Decimal(union)))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two coordinates in degrees."""
    lat_distance = math.radians(lat2 - lat1)
    lon_distance = math.radians(lon2 - lon1)

    a = (
        math.sin(lat_distance / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(lon_distance / 2) ** 2
    )
    # Rounding can push a just past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def geo_proximity(
    point_a: Optional[GeoPoint],
    point_b: Optional[GeoPoint],
    delivery_range: Optional[Decimal],
    fallback: Decimal,
) -> ScoreOutcome:
    """Distance decay score.

    Inside the delivery range the score falls linearly from 1.0 to 0.5;
    beyond it, it decays exponentially from 0.5 towards 0.

    Args:
        point_a: Coordinates of the first listing
        point_b: Coordinates of the second listing
        delivery_range: Range in km (5.0 when missing or not positive)
        fallback: Score returned when either point is missing
    """
    if point_a is None or point_b is None:
        return ScoreOutcome.fallback(fallback, "missing_geo_point")

    max_range = float(delivery_range) if delivery_range is not None and delivery_range > 0 else float(
        DEFAULT_DELIVERY_RANGE_KM
    )
    distance = haversine_km(
        float(point_a.latitude),
        float(point_a.longitude),
        float(point_b.latitude),
        float(point_b.longitude),
    )

    if distance <= max_range:
        proximity = 1.0 - (distance / max_range) * 0.5
    else:
        proximity = 0.5 * math.exp(-(distance - max_range) / max_range)

    return ScoreOutcome.computed(to_score(proximity))


def _price_midpoint(price_min: Decimal, price_max: Optional[Decimal]) -> Decimal:
    if price_max is None:
        return price_min
    return quantize((price_min + price_max) / TWO, 2)


def price_match(
    min_a: Optional[Decimal],
    max_a: Optional[Decimal],
    min_b: Optional[Decimal],
    max_b: Optional[Decimal],
) -> ScoreOutcome:
    """Closeness of the two price-range midpoints, ``exp(-2 * diff / average)``."""
    if min_a is None or min_b is None:
        return ScoreOutcome.fallback(PRICE_FALLBACK, "missing_price")

    mid_a = _price_midpoint(min_a, max_a)
    mid_b = _price_midpoint(min_b, max_b)
    average = quantize((mid_a + mid_b) / TWO, 2)
    if average <= 0:
        return ScoreOutcome.fallback(PRICE_FALLBACK, "zero_average_price")

    diff_fraction = quantize(abs(mid_a - mid_b) / average, 4)
    return ScoreOutcome.computed(to_score(math.exp(-float(diff_fraction) * 2)))


def freshness(
    created_a: Optional[datetime], created_b: Optional[datetime], now: datetime
) -> ScoreOutcome:
    """Recency score from the average age in whole hours.

    Within 48 hours the score falls linearly from 1.0 to 0.7; after that it
    decays exponentially from 0.7. Creation times in the future count as age 0.
    """
    if created_a is None or created_b is None:
        return ScoreOutcome.fallback(FRESHNESS_FALLBACK, "missing_timestamp")

    age_a = max(age_in_whole_hours(created_a, now), 0)
    age_b = max(age_in_whole_hours(created_b, now), 0)
    average_age = (age_a + age_b) / 2.0

    if average_age <= FRESH_WINDOW_HOURS:
        score = 1.0 - (average_age / FRESH_WINDOW_HOURS) * 0.3
    else:
        score = 0.7 * math.exp(-(average_age - FRESH_WINDOW_HOURS) / FRESH_WINDOW_HOURS)

    return ScoreOutcome.computed(to_score(score))


def preference(
    profile_a: Optional[UserProfile],
    profile_b: Optional[UserProfile],
    category: Optional[str],
) -> ScoreOutcome:
    """Publisher preference and reputation score.

    Base 0.5, +0.2 for each profile preferring the category, plus a tenth of
    the average credit score when both are known; capped at 1.0.
    """
    if profile_a is None or profile_b is None:
        return ScoreOutcome.fallback(PREFERENCE_FALLBACK, "missing_profile")

    score = PREFERENCE_BASE
    if profile_a.prefers(category):
        score += PREFERENCE_CATEGORY_BONUS
    if profile_b.prefers(category):
        score += PREFERENCE_CATEGORY_BONUS

    if profile_a.credit_score is not None and profile_b.credit_score is not None:
        average_credit = quantize((profile_a.credit_score + profile_b.credit_score) / TWO, 4)
        score += average_credit * PREFERENCE_CREDIT_FACTOR

    return ScoreOutcome.computed(to_score(_clamp(score)))


def _stepped(value: Decimal, steps, penalty: Decimal, higher_is_better: bool) -> Decimal:
    """Return the adjustment of the first step the value reaches, else the penalty."""
    for bound, adjustment in steps:
        reached = value >= bound if higher_is_better else value <= bound
        if reached:
            return adjustment
    return penalty


def _area_adjustment(area_a: Decimal, area_b: Decimal) -> Decimal:
    larger = max(area_a, area_b)
    if larger <= 0:
        return ZERO
    return _stepped(min(area_a, area_b) / larger, AREA_STEPS, AREA_PENALTY, higher_is_better=True)


def _budget_adjustment(budget_a: Decimal, budget_b: Decimal) -> Decimal:
    average = (budget_a + budget_b) / TWO
    if average <= 0:
        return ZERO
    return _stepped(abs(budget_a - budget_b) / average, BUDGET_STEPS, BUDGET_PENALTY, higher_is_better=False)


def _location_adjustment(hint_a: str, hint_b: str) -> Decimal:
    if hint_a == hint_b:
        return LOCATION_EQUAL
    if hint_a.startswith(hint_b) or hint_b.startswith(hint_a):
        return LOCATION_PREFIX
    return LOCATION_PENALTY


def project_affinity(
    profile_a: Optional[ProjectProfile], profile_b: Optional[ProjectProfile]
) -> ScoreOutcome:
    """Compatibility of two project profiles.

    The base depends on the project types; size, budget, schedule, location,
    style and material then each nudge the score when both sides know them.
    """
    if profile_a is None or profile_b is None:
        return ScoreOutcome.fallback(AFFINITY_NEUTRAL, "missing_profile")
    if not profile_a.is_project and not profile_b.is_project:
        return ScoreOutcome.fallback(AFFINITY_NEUTRAL, "not_a_project")

    if profile_a.is_project and profile_b.is_project:
        score = AFFINITY_SAME_TYPE if profile_a.project_type == profile_b.project_type else AFFINITY_DIFFERENT_TYPE
    else:
        score = AFFINITY_ONE_SIDED

    if profile_a.area_square is not None and profile_b.area_square is not None:
        score += _area_adjustment(profile_a.area_square, profile_b.area_square)

    if profile_a.budget_amount is not None and profile_b.budget_amount is not None:
        score += _budget_adjustment(profile_a.budget_amount, profile_b.budget_amount)

    if profile_a.duration_days is not None and profile_b.duration_days is not None:
        score += _stepped(
            abs(profile_a.duration_days - profile_b.duration_days),
            DURATION_STEPS,
            DURATION_PENALTY,
            higher_is_better=False,
        )

    if profile_a.location_hint and profile_b.location_hint:
        score += _location_adjustment(profile_a.location_hint, profile_b.location_hint)

    if profile_a.style_tags & profile_b.style_tags:
        score += SHARED_STYLE_BONUS
    if profile_a.material_tags & profile_b.material_tags:
        score += SHARED_MATERIAL_BONUS

    return ScoreOutcome.computed(to_score(_clamp(score)))
