"""Human-readable justification of a match.

Phrases are chosen from score thresholds and the supply publisher's
reputation, in a fixed order, and joined with the full-width semicolon.
The semicolon only separates phrases: the text never ends with one,
whichever phrase comes last, so "商品品类高度匹配；价格非常合适" rather than
"商品品类高度匹配；价格非常合适；".
"""

from decimal import Decimal
from typing import List, Optional

from marketmatch.domain.models import UserProfile

from .models import MatchResult

SEPARATOR = "；"
FALLBACK_REASON = "综合评估推荐"

TAG_PHRASE = "商品品类高度匹配"
GEO_CLOSE_PHRASE = "距离很近，配送方便"
GEO_IN_RANGE_PHRASE = "位置在可配送范围内"
PRICE_PHRASE = "价格非常合适"
PROJECT_PHRASE = "项目需求与资源能力高度吻合"
CREDIT_PHRASE = "商家信用良好"
ORDERS_PHRASE = "已完成{count}笔交易"

TAG_THRESHOLD = Decimal("0.7")
GEO_CLOSE_THRESHOLD = Decimal("0.8")
GEO_IN_RANGE_THRESHOLD = Decimal("0.5")
PRICE_THRESHOLD = Decimal("0.8")
PROJECT_THRESHOLD = Decimal("0.6")
CREDIT_THRESHOLD = Decimal("0.8")
ORDERS_THRESHOLD = 5


def build_match_reason(result: MatchResult, publisher_profile: Optional[UserProfile] = None) -> str:
    """Assemble the reason text for a match.

    Args:
        result: Scores of the match
        publisher_profile: Profile of the supply listing's publisher, if known

    Returns:
        Phrases joined with "；", or the generic fallback when none apply

    Example:
        >>> build_match_reason(MatchResult(tag_similarity=Decimal("0.8")))
        '商品品类高度匹配'
    """
    phrases: List[str] = []

    if result.tag_similarity >= TAG_THRESHOLD:
        phrases.append(TAG_PHRASE)

    if result.geo_proximity >= GEO_CLOSE_THRESHOLD:
        phrases.append(GEO_CLOSE_PHRASE)
    elif result.geo_proximity >= GEO_IN_RANGE_THRESHOLD:
        phrases.append(GEO_IN_RANGE_PHRASE)

    if result.price_match >= PRICE_THRESHOLD:
        phrases.append(PRICE_PHRASE)

    if result.project_affinity >= PROJECT_THRESHOLD:
        phrases.append(PROJECT_PHRASE)

    if publisher_profile is not None:
        if publisher_profile.credit_score is not None and publisher_profile.credit_score >= CREDIT_THRESHOLD:
            phrases.append(CREDIT_PHRASE)
        if publisher_profile.total_orders is not None and publisher_profile.total_orders > ORDERS_THRESHOLD:
            phrases.append(ORDERS_PHRASE.format(count=publisher_profile.total_orders))

    return SEPARATOR.join(phrases) if phrases else FALLBACK_REASON
