"""Environment variable loading and validation."""

import os
from typing import Optional

from .duration import DurationParseError, parse_duration, validate_duration_range
from .exceptions import ConfigurationError
from .loader import CONFIG_LOCATION_ENV

DEFAULT_CONFIG_TTL = "5m"
DEFAULT_DATABASE_URL = "sqlite:///./data/marketplace.db"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("json", "key-value")


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        matching_config_location: Optional[str] = None,
        config_cache_ttl_seconds: int = 300,
        log_level: str = "INFO",
        log_format: str = "key-value",
        database_url: Optional[str] = None,
    ):
        """Initialize environment configuration."""
        self.matching_config_location = matching_config_location
        self.config_cache_ttl_seconds = config_cache_ttl_seconds
        self.log_level = log_level
        self.log_format = log_format
        self.database_url = database_url or DEFAULT_DATABASE_URL


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional:
    - MARKETPLACE_MATCHING_CONFIG_LOCATION: Path to the matching config document
    - MATCHING_CONFIG_TTL: Config cache time-to-live (e.g. "5m", "PT30S"; default 5m)
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
    - LOG_FORMAT: json or key-value (default key-value)
    - DATABASE_URL: Database URL (default: sqlite:///./data/marketplace.db)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable has an invalid value
    """
    errors = []

    location = os.getenv(CONFIG_LOCATION_ENV, "").strip() or None
    ttl_str = os.getenv("MATCHING_CONFIG_TTL", DEFAULT_CONFIG_TTL)
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    log_format = os.getenv("LOG_FORMAT", "key-value").strip().lower()
    database_url = os.getenv("DATABASE_URL", "").strip() or None

    ttl_seconds = None
    try:
        ttl_seconds = parse_duration(ttl_str)
        validate_duration_range(ttl_seconds)
    except DurationParseError as e:
        errors.append(f"Invalid MATCHING_CONFIG_TTL: {e}")

    if log_level not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if log_format not in VALID_LOG_FORMATS:
        errors.append(
            f"Invalid LOG_FORMAT: '{log_format}'. Must be one of: {', '.join(VALID_LOG_FORMATS)}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Use a duration like '5m' or 'PT5M' for MATCHING_CONFIG_TTL",
                "Unset optional variables to use their defaults",
            ],
        )

    return EnvironmentConfig(
        matching_config_location=location,
        config_cache_ttl_seconds=ttl_seconds,
        log_level=log_level,
        log_format=log_format,
        database_url=database_url,
    )
