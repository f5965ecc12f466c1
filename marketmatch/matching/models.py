"""Data models for the matching engine.

This module defines the value types passed between the dimension scorers,
the project profile extractor, and the match finder.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, FrozenSet, NamedTuple, Optional

from marketmatch.domain.models import Listing

ZERO = Decimal("0")

TAG_SIMILARITY = "tag_similarity"
GEO_PROXIMITY = "geo_proximity"
PRICE_MATCH = "price_match"
FRESHNESS = "freshness"
PREFERENCE = "preference"
PROJECT_AFFINITY = "project_affinity"

DIMENSIONS = (
    TAG_SIMILARITY,
    GEO_PROXIMITY,
    PRICE_MATCH,
    FRESHNESS,
    PREFERENCE,
    PROJECT_AFFINITY,
)


class ProjectType:
    """Well-known project type values.

    Metadata may state any other non-empty string; such values count as
    projects too.
    """

    EXHIBITION_SETUP = "EXHIBITION_SETUP"
    RENOVATION = "RENOVATION"
    ENGINEERING = "ENGINEERING"
    NONE = "NONE"
    NOT_PROJECT = "NOT_PROJECT"


class ScoreOutcome(NamedTuple):
    """Score of a single dimension.

    Attributes:
        value: Score in [0, 1] with four fractional digits
        fallback_reason: None when computed from data, otherwise a short
            reason code naming why the constant fallback was used
    """

    value: Decimal
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    @classmethod
    def computed(cls, value: Decimal) -> "ScoreOutcome":
        return cls(value, None)

    @classmethod
    def fallback(cls, value: Decimal, reason: str) -> "ScoreOutcome":
        return cls(value, reason)


@dataclass(frozen=True)
class ProjectProfile:
    """Structured project attributes inferred from a listing.

    Attributes:
        project_type: One of ProjectType or an arbitrary metadata string
        area_square: Area in square meters
        budget_amount: Budget in CNY
        duration_days: Duration in days
        location_hint: Short place name
        style_tags: Style keywords found in text or metadata
        material_tags: Material keywords found in text or metadata
        keywords: Contiguous Han-character runs of the corpus
        metadata: Merged insight metadata
    """

    project_type: str = ProjectType.NONE
    area_square: Optional[Decimal] = None
    budget_amount: Optional[Decimal] = None
    duration_days: Optional[Decimal] = None
    location_hint: Optional[str] = None
    style_tags: FrozenSet[str] = frozenset()
    material_tags: FrozenSet[str] = frozenset()
    keywords: FrozenSet[str] = frozenset()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_project(self) -> bool:
        """True unless the type is NONE or the explicit NOT_PROJECT marker."""
        return bool(self.project_type) and self.project_type not in (
            ProjectType.NONE,
            ProjectType.NOT_PROJECT,
        )


@dataclass(frozen=True)
class MatchResult:
    """Composite and per-dimension scores for one listing pair.

    Attributes:
        match_score: Weighted sum of the six dimension scores
        tag_similarity: Jaccard index of the tag sets
        geo_proximity: Distance decay score
        price_match: Price midpoint closeness
        freshness: Age decay score
        preference: Publisher preference and credit score
        project_affinity: Project profile compatibility
        fallbacks: Dimension name -> reason for every dimension that used
            its constant fallback
        error: Set only when scoring failed and the result was forced to 0
    """

    match_score: Decimal = ZERO
    tag_similarity: Decimal = ZERO
    geo_proximity: Decimal = ZERO
    price_match: Decimal = ZERO
    freshness: Decimal = ZERO
    preference: Decimal = ZERO
    project_affinity: Decimal = ZERO
    fallbacks: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_failsafe(self) -> bool:
        """True if an unexpected fault forced the composite score to 0."""
        return self.error is not None

    def component_scores(self) -> Dict[str, Decimal]:
        """Return the six dimension scores keyed by dimension name."""
        return {name: getattr(self, name) for name in DIMENSIONS}

    @classmethod
    def failsafe(cls, error: str) -> "MatchResult":
        return cls(error=error)


class RankedMatch(NamedTuple):
    """A scored candidate returned by the match finder."""

    result: MatchResult
    candidate: Listing

    @property
    def score(self) -> Decimal:
        return self.result.match_score
