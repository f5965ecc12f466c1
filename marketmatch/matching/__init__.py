"""Scoring and ranking engine for marketplace listings.

This module provides:
- SmartMatchingEngine: scores listing pairs, ranks candidates, explains matches
- MatchResult / RankedMatch / ScoreOutcome: result value types
- ProjectProfile / ProjectProfileExtractor: project attributes inferred from text
- MatchingRepositories: bundle of the read interfaces the engine depends on
- build_match_reason: reason text from scores and publisher reputation
"""

from .engine import SmartMatchingEngine
from .models import DIMENSIONS, MatchResult, ProjectProfile, ProjectType, RankedMatch, ScoreOutcome
from .profile import ProjectProfileExtractor
from .protocols import (
    GeoPointReader,
    InsightReader,
    ListingReader,
    MatchingRepositories,
    TagReader,
    UserProfileReader,
)
from .reasons import build_match_reason

__all__ = [
    "SmartMatchingEngine",
    "MatchResult",
    "RankedMatch",
    "ScoreOutcome",
    "ProjectProfile",
    "ProjectType",
    "ProjectProfileExtractor",
    "DIMENSIONS",
    "MatchingRepositories",
    "ListingReader",
    "TagReader",
    "GeoPointReader",
    "UserProfileReader",
    "InsightReader",
    "build_match_reason",
]
