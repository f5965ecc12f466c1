"""Additional validation utilities for matching configuration."""

from decimal import Decimal
from typing import List

from marketmatch.logging import get_logger

from .models import MatchingConfig

logger = get_logger(__name__, component="config")

WEIGHT_SUM_TOLERANCE = Decimal("0.001")


def check_for_warnings(config: MatchingConfig) -> List[str]:
    """
    Check a matching configuration for suspicious but accepted values.

    Weights are used exactly as configured, so a total other than 1.0 shifts
    every composite score; a default minimum score above the reachable
    maximum filters out every candidate.

    Args:
        config: Validated matching configuration

    Returns:
        List of warning messages
    """
    warning_messages = []

    total = config.weights.total
    if abs(total - Decimal("1")) > WEIGHT_SUM_TOLERANCE:
        warning_messages.append(
            f"Dimension weights sum to {total}, not 1.0; composite scores are not bounded to [0, 1]"
        )

    if config.thresholds.default_min_score > total:
        warning_messages.append(
            f"defaultMinScore {config.thresholds.default_min_score} exceeds the maximum "
            f"reachable composite score {total}; no candidate can match by default"
        )

    shared = set(config.keywords.exhibition) & set(config.keywords.renovation)
    shared |= set(config.keywords.exhibition) & set(config.keywords.engineering)
    shared |= set(config.keywords.renovation) & set(config.keywords.engineering)
    if shared:
        warning_messages.append(
            f"Keywords listed under more than one project type: {', '.join(sorted(shared))}"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str], location: str = None) -> None:
    """
    Log configuration warnings.

    Args:
        warning_messages: List of warning messages to emit
        location: Configuration resource the warnings refer to
    """
    for message in warning_messages:
        logger.warning(
            message,
            extra={"event": "config.warning", "config_location": location},
        )
