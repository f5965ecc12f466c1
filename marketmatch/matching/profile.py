"""Project profile extraction from listing text and insight metadata.

Every attribute has its own pure function taking the corpus text and the
merged metadata, so each heuristic can be tested against literal strings.
Explicit metadata wins over text for the project type; for the numeric
attributes and the location the text match comes first and metadata is the
fallback.
"""

import re
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from marketmatch.config.models import KeywordsConfig
from marketmatch.domain.models import Listing, ListingInsight
from marketmatch.logging import get_logger
from marketmatch.persistence.exceptions import PersistenceError
from marketmatch.utils.decimals import to_decimal

from .models import ProjectProfile, ProjectType
from .protocols import InsightReader

logger = get_logger(__name__, component="matching")

# CJK unified ideographs, extension A and compatibility ideographs
_HAN = "\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff"

# Whitespace between a number and its unit; full-width spaces do not count
_SPACE = r"[ \t\n\x0b\f\r]*"

AREA_PATTERN = re.compile(rf"([0-9]+(?:\.[0-9]+)?){_SPACE}(平米|平方米|㎡|m2|平方)")
BUDGET_PATTERN = re.compile(rf"([0-9]+(?:\.[0-9]+)?){_SPACE}(万|万元|千|k|元|人民币|rmb)")
DURATION_PATTERN = re.compile(rf"([0-9]+(?:\.[0-9]+)?){_SPACE}(天|日|周|月|年)")
LOCATION_PATTERN = re.compile(
    rf"(?:在|位于|地址|地点|于)([{_HAN}]{{2,9}})(?:省|市|区|县|镇|馆|中心|展馆|工地)"
)
HAN_RUN_PATTERN = re.compile(rf"[{_HAN}]+")

DAYS_PER_UNIT = {
    "天": Decimal("1"),
    "日": Decimal("1"),
    "周": Decimal("7"),
    "月": Decimal("30"),
    "年": Decimal("365"),
}

META_PROJECT_TYPE = "projectType"
META_AREA = "estimatedArea"
META_BUDGET = "budgetAmountCny"
META_DURATION = "estimatedDurationDays"
META_LOCATIONS = "locationHints"
META_STYLES = "stylePreferences"
META_MATERIALS = "materialKeywords"


def _metadata_text(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return " ".join(str(item) for item in value if item is not None)
    return str(value)


def build_corpus(listing: Listing, insights: Sequence[ListingInsight]) -> Tuple[str, Dict[str, Any]]:
    """Concatenate the listing text with insight summaries and metadata values.

    Metadata maps are merged in insight order, later keys winning.

    Returns:
        Tuple of (corpus text, merged metadata)
    """
    parts: List[str] = []
    for text in (listing.title, listing.description, listing.category, listing.sub_category):
        if text is not None:
            parts.append(text)

    metadata: Dict[str, Any] = {}
    for insight in insights:
        if insight.summary is not None:
            parts.append(insight.summary)
        metadata.update(insight.metadata)
        for value in insight.metadata.values():
            if value is not None:
                parts.append(_metadata_text(value))

    corpus = "".join(f"{part} " for part in parts)
    return corpus, metadata


def extract_han_tokens(text: str) -> FrozenSet[str]:
    """Return the set of contiguous Han-character runs in text."""
    return frozenset(HAN_RUN_PATTERN.findall(text))


def count_keyword_hits(text: str, keywords: Iterable[str]) -> int:
    """Count keywords present in text, case-sensitively or else case-insensitively."""
    if not text:
        return 0
    lower = text.lower()
    return sum(1 for keyword in keywords if keyword in text or keyword.lower() in lower)


def classify_project_type(
    text: str, keywords: KeywordsConfig, metadata: Optional[Mapping[str, Any]] = None
) -> str:
    """Pick the project type with the most keyword hits.

    Ties prefer exhibition, then renovation, then engineering. A non-empty
    string in metadata ``projectType`` overrides the text classification.
    """
    project_type = ProjectType.NONE

    exhibition = count_keyword_hits(text, keywords.exhibition)
    renovation = count_keyword_hits(text, keywords.renovation)
    engineering = count_keyword_hits(text, keywords.engineering)

    if exhibition > 0 and exhibition >= renovation and exhibition >= engineering:
        project_type = ProjectType.EXHIBITION_SETUP
    elif renovation > 0 and renovation >= exhibition and renovation >= engineering:
        project_type = ProjectType.RENOVATION
    elif engineering > 0:
        project_type = ProjectType.ENGINEERING

    stated = (metadata or {}).get(META_PROJECT_TYPE)
    if isinstance(stated, str) and stated:
        project_type = stated

    return project_type


def _metadata_number(metadata: Optional[Mapping[str, Any]], key: str) -> Optional[Decimal]:
    """Return a numeric metadata value; strings and booleans do not count."""
    value = (metadata or {}).get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    return to_decimal(value)


def _metadata_list(metadata: Optional[Mapping[str, Any]], key: str) -> List[Any]:
    value = (metadata or {}).get(key)
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return []


def extract_area(text: str, metadata: Optional[Mapping[str, Any]] = None) -> Optional[Decimal]:
    """Area in square meters, e.g. ``"100平米"`` -> ``Decimal("100")``."""
    match = AREA_PATTERN.search(text)
    if match:
        return Decimal(match.group(1))
    return _metadata_number(metadata, META_AREA)


def extract_budget(text: str, metadata: Optional[Mapping[str, Any]] = None) -> Optional[Decimal]:
    """Budget in CNY, e.g. ``"20万"`` -> ``Decimal("200000")``.

    Matching runs on the lower-cased text so ``5K`` and ``RMB`` are found.
    """
    match = BUDGET_PATTERN.search(text.lower())
    if match:
        amount = Decimal(match.group(1))
        unit = match.group(2)
        if "万" in unit:
            return amount * Decimal("10000")
        if "千" in unit or "k" in unit:
            return amount * Decimal("1000")
        return amount
    return _metadata_number(metadata, META_BUDGET)


def extract_duration(text: str, metadata: Optional[Mapping[str, Any]] = None) -> Optional[Decimal]:
    """Duration in days, e.g. ``"2周"`` -> ``Decimal("14")``."""
    match = DURATION_PATTERN.search(text)
    if match:
        return Decimal(match.group(1)) * DAYS_PER_UNIT[match.group(2)]
    return _metadata_number(metadata, META_DURATION)


def extract_location_hint(text: str, metadata: Optional[Mapping[str, Any]] = None) -> Optional[str]:
    """Place name after a locative marker, e.g. ``"位于上海市"`` -> ``"上海"``."""
    match = LOCATION_PATTERN.search(text)
    if match:
        return match.group(1)
    hints = _metadata_list(metadata, META_LOCATIONS)
    if hints and hints[0] is not None:
        return str(hints[0])
    return None


def collect_tags(
    text: str, keywords: Iterable[str], metadata: Optional[Mapping[str, Any]] = None, key: str = ""
) -> FrozenSet[str]:
    """Keywords present in text, unioned with the metadata list under key."""
    tags = {keyword for keyword in keywords if keyword in text}
    tags.update(str(item) for item in _metadata_list(metadata, key) if item is not None)
    return frozenset(tags)


class ProjectProfileExtractor:
    """Builds ProjectProfile values for listings.

    Keyword dictionaries are injected so extraction stays deterministic for a
    given configuration.
    """

    def __init__(self, keywords: KeywordsConfig, insight_reader: Optional[InsightReader] = None):
        """Initialize the extractor.

        Args:
            keywords: Keyword dictionaries for classification and tags
            insight_reader: Used to load insights when extract() is not given any
        """
        self.keywords = keywords
        self.insight_reader = insight_reader

    def extract(
        self, listing: Listing, insights: Optional[Sequence[ListingInsight]] = None
    ) -> ProjectProfile:
        """Extract the project profile of a listing.

        Args:
            listing: Listing to profile
            insights: Insights of the listing; loaded through the insight
                reader when None

        Returns:
            ProjectProfile (project type NONE when there is no text at all)
        """
        if insights is None:
            insights = self._load_insights(listing.listing_id)

        corpus, metadata = build_corpus(listing, insights)
        if not corpus:
            return ProjectProfile(metadata=metadata)

        profile = ProjectProfile(
            project_type=classify_project_type(corpus, self.keywords, metadata),
            area_square=extract_area(corpus, metadata),
            budget_amount=extract_budget(corpus, metadata),
            duration_days=extract_duration(corpus, metadata),
            location_hint=extract_location_hint(corpus, metadata),
            style_tags=collect_tags(corpus, self.keywords.style, metadata, META_STYLES),
            material_tags=collect_tags(corpus, self.keywords.material, metadata, META_MATERIALS),
            keywords=extract_han_tokens(corpus),
            metadata=metadata,
        )

        logger.debug(
            f"Extracted project profile for listing {listing.listing_id}",
            extra={
                "event": "profile.extracted",
                "listing_id": listing.listing_id,
                "project_type": profile.project_type,
                "insight_count": len(insights),
            },
        )
        return profile

    def _load_insights(self, listing_id: str) -> List[ListingInsight]:
        if self.insight_reader is None:
            return []
        try:
            return list(self.insight_reader.list_by_listing(listing_id))
        except PersistenceError as e:
            logger.debug(
                f"Failed to load insights for listing {listing_id}: {e}",
                extra={"event": "profile.insights_unavailable", "listing_id": listing_id},
            )
            return []
