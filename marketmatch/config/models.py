"""Matching configuration schema models using Pydantic.

External configuration documents use camelCase keys (``tagSimilarity``,
``defaultMinScore``); the models expose snake_case attributes and accept
either spelling. All models are frozen so a loaded configuration can be
shared between threads and swapped atomically by the config store.
"""

from decimal import Decimal
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field, field_validator

from marketmatch.utils.decimals import to_decimal

DEFAULT_EXHIBITION_KEYWORDS: Tuple[str, ...] = (
    "展台", "搭建", "会展", "展览", "布展", "展位", "展厅", "展馆", "巡展",
)
DEFAULT_RENOVATION_KEYWORDS: Tuple[str, ...] = (
    "装修", "改造", "翻新", "设计", "施工", "家装", "工装", "装潢", "软装", "硬装",
)
DEFAULT_ENGINEERING_KEYWORDS: Tuple[str, ...] = (
    "工程", "总包", "施工队", "钢结构", "机电", "土建", "建材", "脚手架",
    "设备租赁", "电气", "管道", "消防", "弱电", "暖通", "安装",
)
DEFAULT_STYLE_KEYWORDS: Tuple[str, ...] = (
    "现代", "科技", "工业", "中式", "欧式", "简约", "奢华", "北欧",
    "复古", "工业风", "极简", "科技感",
)
DEFAULT_MATERIAL_KEYWORDS: Tuple[str, ...] = (
    "钢结构", "桁架", "木材", "灯光", "音响", "LED", "玻璃", "铝合金", "地毯",
    "石材", "PVC", "喷绘", "舞台", "幕布", "地板", "龙骨", "设备",
)

_FROZEN_ALIASED = {"populate_by_name": True, "frozen": True}


def _coerce_decimal(value: Any) -> Decimal:
    """Convert numbers and numeric strings to Decimal via their text form."""
    result = to_decimal(value)
    if result is None:
        raise ValueError(f"expected a decimal number, got {value!r}")
    return result


class WeightsConfig(BaseModel):
    """Relative weight of each dimension in the composite score."""

    tag_similarity: Decimal = Field(Decimal("0.30"), ge=0, alias="tagSimilarity")
    geo_proximity: Decimal = Field(Decimal("0.20"), ge=0, alias="geoProximity")
    price_match: Decimal = Field(Decimal("0.15"), ge=0, alias="priceMatch")
    freshness: Decimal = Field(Decimal("0.10"), ge=0, alias="freshness")
    preference: Decimal = Field(Decimal("0.10"), ge=0, alias="preference")
    project_affinity: Decimal = Field(Decimal("0.15"), ge=0, alias="projectAffinity")

    model_config = _FROZEN_ALIASED

    @field_validator("*", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Decimal:
        """Accept numbers and numeric strings, rejecting booleans."""
        return _coerce_decimal(v)

    def as_dict(self) -> Dict[str, Decimal]:
        """Return weights keyed by dimension name."""
        return {
            "tag_similarity": self.tag_similarity,
            "geo_proximity": self.geo_proximity,
            "price_match": self.price_match,
            "freshness": self.freshness,
            "preference": self.preference,
            "project_affinity": self.project_affinity,
        }

    @property
    def total(self) -> Decimal:
        """Sum of all six weights."""
        return sum(self.as_dict().values(), Decimal("0"))


class ThresholdsConfig(BaseModel):
    """Score thresholds and fallback constants."""

    default_min_score: Decimal = Field(
        Decimal("0.6"), ge=0, le=1, alias="defaultMinScore",
        description="Minimum composite score used when the caller gives none",
    )
    geo_fallback_score: Decimal = Field(
        Decimal("0.5"), ge=0, le=1, alias="geoFallbackScore",
        description="Geo proximity score when a location is missing",
    )

    model_config = _FROZEN_ALIASED

    @field_validator("*", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Decimal:
        """Accept numbers and numeric strings, rejecting booleans."""
        return _coerce_decimal(v)


class KeywordsConfig(BaseModel):
    """Keyword dictionaries used by the project profile extractor."""

    exhibition: Tuple[str, ...] = DEFAULT_EXHIBITION_KEYWORDS
    renovation: Tuple[str, ...] = DEFAULT_RENOVATION_KEYWORDS
    engineering: Tuple[str, ...] = DEFAULT_ENGINEERING_KEYWORDS
    style: Tuple[str, ...] = DEFAULT_STYLE_KEYWORDS
    material: Tuple[str, ...] = DEFAULT_MATERIAL_KEYWORDS

    model_config = {"frozen": True}

    @field_validator("*", mode="before")
    @classmethod
    def normalize_keywords(cls, v: Any) -> Tuple[str, ...]:
        """Strip entries, drop blanks and duplicates; reject empty dictionaries."""
        if isinstance(v, (str, bytes)) or not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError("keyword dictionary must be a list of strings")
        normalized = []
        for item in v:
            if item is None:
                continue
            stripped = str(item).strip()
            if stripped and stripped not in normalized:
                normalized.append(stripped)
        if not normalized:
            raise ValueError("keyword dictionary cannot be empty")
        return tuple(normalized)


class MatchingConfig(BaseModel):
    """Root matching configuration: weights, thresholds and keyword dictionaries."""

    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    keywords: KeywordsConfig = Field(default_factory=KeywordsConfig)

    model_config = {"frozen": True}

    @classmethod
    def defaults(cls) -> "MatchingConfig":
        """Return the built-in configuration."""
        return cls()
