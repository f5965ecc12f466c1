"""Configuration management for the marketplace matching engine."""

from .duration import DurationParseError, parse_duration
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import (
    CONFIG_LOCATION_ENV,
    build_matching_config,
    load_matching_config,
    read_config_document,
    resolve_config_location,
)
from .models import KeywordsConfig, MatchingConfig, ThresholdsConfig, WeightsConfig
from .store import ConfigStore

__all__ = [
    # Loader functions
    "load_matching_config",
    "read_config_document",
    "build_matching_config",
    "resolve_config_location",
    "load_environment_config",
    "parse_duration",
    "CONFIG_LOCATION_ENV",
    # Configuration models
    "MatchingConfig",
    "WeightsConfig",
    "ThresholdsConfig",
    "KeywordsConfig",
    "EnvironmentConfig",
    # Cache
    "ConfigStore",
    # Exceptions
    "ConfigurationError",
    "DurationParseError",
]
