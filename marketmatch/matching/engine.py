"""Scoring and ranking engine for supply/demand listing pairs.

This module implements the matching logic that:
1. Scores a listing pair on six dimensions and combines them with the
   configured weights
2. Ranks the opposite-side candidates of a source listing
3. Explains a match with a short reason text

Missing data never fails a match; it yields per-dimension fallback scores.
An unexpected fault while scoring a pair forces that pair's composite score
to 0 instead of propagating.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from marketmatch.config.models import MatchingConfig
from marketmatch.config.store import ConfigStore
from marketmatch.domain.models import Listing, UserProfile
from marketmatch.logging import get_logger
from marketmatch.logging.context import log_context
from marketmatch.persistence.exceptions import PersistenceError
from marketmatch.utils.decimals import quantize, to_decimal
from marketmatch.utils.timestamps import utc_now

from . import scorers
from .models import (
    FRESHNESS,
    GEO_PROXIMITY,
    PREFERENCE,
    PRICE_MATCH,
    PROJECT_AFFINITY,
    TAG_SIMILARITY,
    MatchResult,
    ProjectProfile,
    RankedMatch,
    ScoreOutcome,
)
from .profile import ProjectProfileExtractor
from .protocols import MatchingRepositories
from .reasons import build_match_reason

logger = get_logger(__name__, component="matching")

DEFAULT_MAX_RESULTS = 10


class SmartMatchingEngine:
    """Scores and ranks marketplace listings against each other.

    Responsibilities:
    - Compute the six dimension scores of a listing pair
    - Combine them into the weighted composite score
    - Find, filter, and rank candidates for a source listing
    - Generate the reason text shown with a match
    """

    def __init__(
        self,
        repositories: MatchingRepositories,
        config_store: Optional[ConfigStore] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        """Initialize SmartMatchingEngine.

        Args:
            repositories: Readers for listings and their reference data
            config_store: Source of weights, thresholds, and keywords
                (a store over the default location when None)
            now: Clock used for listing ages (injectable for tests)
        """
        self.repositories = repositories
        self.config_store = config_store or ConfigStore()
        self.now = now

    @classmethod
    def from_session(
        cls, session: Session, config_store: Optional[ConfigStore] = None
    ) -> "SmartMatchingEngine":
        """Build an engine reading from the SQL repositories of a session."""
        return cls(MatchingRepositories.from_session(session), config_store)

    def profile_extractor(self, config: Optional[MatchingConfig] = None) -> ProjectProfileExtractor:
        """Return a profile extractor using the configured keyword dictionaries."""
        config = config or self.config_store.get_config()
        return ProjectProfileExtractor(config.keywords, self.repositories.insights)

    def calculate_match_score(
        self,
        listing_a: Listing,
        listing_b: Listing,
        profile_a: Optional[ProjectProfile] = None,
        profile_b: Optional[ProjectProfile] = None,
    ) -> MatchResult:
        """Score a listing pair.

        Geo proximity uses listing_a's delivery range and preference uses
        listing_b's category. Profiles that are not given are extracted.

        Args:
            listing_a: First (source) listing
            listing_b: Second (candidate) listing
            profile_a: Pre-computed project profile of listing_a
            profile_b: Pre-computed project profile of listing_b

        Returns:
            MatchResult; a fail-safe result with composite 0 if scoring failed
        """
        return self._score_pair(listing_a, listing_b, profile_a, profile_b, config=None)

    def find_matches_for_listing(
        self,
        listing_id: str,
        max_results: int = DEFAULT_MAX_RESULTS,
        min_score: Optional[Decimal] = None,
    ) -> List[RankedMatch]:
        """Find the best opposite-side matches of a listing.

        Algorithm:
        1. Load the source listing (unknown id -> empty list)
        2. Load ACTIVE listings of the opposite type in the same category
        3. Extract the source profile once and score every candidate
        4. Keep candidates scoring at least min_score
        5. Sort by composite score descending, ties in candidate order
        6. Truncate to max_results

        Args:
            listing_id: Source listing id
            max_results: Maximum number of matches to return
            min_score: Minimum composite score (configured default when None)

        Returns:
            Ranked list of (MatchResult, candidate listing)

        Raises:
            ValueError: If max_results is negative
        """
        if max_results < 0:
            raise ValueError(f"max_results must be non-negative, got {max_results}")

        with log_context(listing_id=listing_id):
            source = self.repositories.listings.get_by_id(listing_id)
            if source is None:
                logger.warning(
                    f"Listing not found: {listing_id}",
                    extra={"event": "matching.find.not_found"},
                )
                return []

            config = self.config_store.get_config()
            threshold = (
                config.thresholds.default_min_score
                if min_score is None
                else to_decimal(min_score, config.thresholds.default_min_score)
            )
            target_type = source.listing_type.opposite()

            candidates = self.repositories.listings.find_active(target_type, source.category)
            logger.info(
                f"Found {len(candidates)} candidate listings",
                extra={
                    "event": "matching.find.started",
                    "target_type": target_type.value,
                    "category": source.category,
                    "candidate_count": len(candidates),
                    "min_score": threshold,
                },
            )

            source_profile = self.profile_extractor(config).extract(source)

            matches: List[RankedMatch] = []
            for candidate in candidates:
                result = self._score_pair(source, candidate, source_profile, None, config)
                if result.match_score >= threshold:
                    matches.append(RankedMatch(result, candidate))

            # Stable sort keeps fetch order for equal scores
            matches.sort(key=lambda match: match.score, reverse=True)
            matches = matches[:max_results]

            logger.info(
                f"Found {len(matches)} matches above threshold {threshold}",
                extra={
                    "event": "matching.find.completed",
                    "match_count": len(matches),
                    "min_score": threshold,
                    "max_results": max_results,
                },
            )
            return matches

    def generate_match_reason(
        self, result: MatchResult, supply_listing: Listing, demand_listing: Listing
    ) -> str:
        """Explain a match using its scores and the supply publisher's reputation."""
        publisher_profile = self._publisher_profile(supply_listing.publisher_id)
        return build_match_reason(result, publisher_profile)

    def _score_pair(
        self,
        listing_a: Listing,
        listing_b: Listing,
        profile_a: Optional[ProjectProfile],
        profile_b: Optional[ProjectProfile],
        config: Optional[MatchingConfig],
    ) -> MatchResult:
        try:
            config = config or self.config_store.get_config()
            repositories = self.repositories

            outcomes: Dict[str, ScoreOutcome] = {
                TAG_SIMILARITY: scorers.tag_similarity(
                    repositories.tags.get_tag_ids(listing_a.listing_id),
                    repositories.tags.get_tag_ids(listing_b.listing_id),
                ),
                GEO_PROXIMITY: self._geo_proximity(listing_a, listing_b, config),
                PRICE_MATCH: scorers.price_match(
                    listing_a.price_min, listing_a.price_max, listing_b.price_min, listing_b.price_max
                ),
                FRESHNESS: scorers.freshness(listing_a.created_at, listing_b.created_at, self.now()),
                PREFERENCE: scorers.preference(
                    self._user_profile(listing_a.publisher_id),
                    self._user_profile(listing_b.publisher_id),
                    listing_b.category,
                ),
            }

            if profile_a is None or profile_b is None:
                extractor = self.profile_extractor(config)
                if profile_a is None:
                    profile_a = extractor.extract(listing_a)
                if profile_b is None:
                    profile_b = extractor.extract(listing_b)
            outcomes[PROJECT_AFFINITY] = scorers.project_affinity(profile_a, profile_b)

            weights = config.weights.as_dict()
            composite = quantize(
                sum((outcome.value * weights[name] for name, outcome in outcomes.items()), Decimal("0"))
            )

            result = MatchResult(
                match_score=composite,
                **{name: outcome.value for name, outcome in outcomes.items()},
                fallbacks={
                    name: outcome.fallback_reason
                    for name, outcome in outcomes.items()
                    if outcome.is_fallback
                },
            )
        except Exception as e:
            logger.error(
                f"Error calculating match score for {listing_a.listing_id} / {listing_b.listing_id}: {e}",
                exc_info=True,
                extra={
                    "event": "matching.score.failed",
                    "listing_a": listing_a.listing_id,
                    "listing_b": listing_b.listing_id,
                    "error_type": type(e).__name__,
                },
            )
            return MatchResult.failsafe(f"{type(e).__name__}: {e}")

        logger.debug(
            f"Match score calculated: {result.match_score}",
            extra={
                "event": "matching.score.calculated",
                "listing_a": listing_a.listing_id,
                "listing_b": listing_b.listing_id,
                "match_score": result.match_score,
                **result.component_scores(),
                "fallbacks": result.fallbacks,
            },
        )
        return result

    def _geo_proximity(self, listing_a: Listing, listing_b: Listing, config: MatchingConfig) -> ScoreOutcome:
        fallback = config.thresholds.geo_fallback_score
        if listing_a.geo_point_id is None or listing_b.geo_point_id is None:
            return ScoreOutcome.fallback(fallback, "missing_geo_point")

        try:
            point_a = self.repositories.geo_points.get_by_id(listing_a.geo_point_id)
            point_b = self.repositories.geo_points.get_by_id(listing_b.geo_point_id)
        except PersistenceError as e:
            logger.warning(
                f"Error loading geo points: {e}",
                extra={"event": "matching.geo.lookup_failed"},
            )
            return ScoreOutcome.fallback(fallback, "geo_lookup_failed")

        if point_a is None or point_b is None:
            return ScoreOutcome.fallback(fallback, "geo_point_not_found")

        return scorers.geo_proximity(point_a, point_b, listing_a.effective_delivery_range, fallback)

    def _user_profile(self, party_id: Optional[str]) -> Optional[UserProfile]:
        if party_id is None:
            return None
        return self.repositories.profiles.get_by_party_id(party_id)

    def _publisher_profile(self, party_id: Optional[str]) -> Optional[UserProfile]:
        try:
            return self._user_profile(party_id)
        except PersistenceError as e:
            logger.warning(
                f"Error loading publisher profile {party_id}: {e}",
                extra={"event": "matching.reason.profile_unavailable"},
            )
            return None
