"""Configuration loader for the matching engine.

The matching configuration is an optional JSON or YAML document with three
optional sections (``weights``, ``thresholds``, ``keywords``). Every section
and every field inside it falls back to its built-in default independently,
so a document with one bad value still contributes all of its good ones.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

import yaml
from pydantic import BaseModel, ValidationError

from .exceptions import ConfigurationError
from .models import KeywordsConfig, MatchingConfig, ThresholdsConfig, WeightsConfig

CONFIG_LOCATION_ENV = "MARKETPLACE_MATCHING_CONFIG_LOCATION"
DEFAULT_CONFIG_PATH = Path(__file__).with_name("matching-config.json")

_SECTIONS: Dict[str, Type[BaseModel]] = {
    "weights": WeightsConfig,
    "thresholds": ThresholdsConfig,
    "keywords": KeywordsConfig,
}


def resolve_config_location(override: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve where the matching configuration should be read from.

    Resolution order:
    1. Explicit override passed by the caller
    2. MARKETPLACE_MATCHING_CONFIG_LOCATION environment variable
    3. The configuration bundled with the package

    Args:
        override: Optional explicit path

    Returns:
        Path to the configuration resource (not checked for existence)
    """
    if override:
        return Path(override)

    from_env = os.getenv(CONFIG_LOCATION_ENV, "").strip()
    if from_env:
        return Path(from_env)

    return DEFAULT_CONFIG_PATH


def read_config_document(config_path: Path) -> Dict[str, Any]:
    """
    Read and parse a configuration resource.

    Files ending in ``.json`` are parsed as JSON, anything else as YAML.

    Args:
        config_path: Path to the configuration resource

    Returns:
        Parsed top-level mapping

    Raises:
        ConfigurationError: If the resource is missing, unreadable, unparseable,
            or its top level is not a mapping
    """
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(
            "Matching configuration not found",
            location=config_path,
            suggestions=[
                f"Create the file or set {CONFIG_LOCATION_ENV} to an existing file",
            ],
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read matching configuration: {e}",
            location=config_path,
            suggestions=["Check file permissions"],
        )

    if not text.strip():
        raise ConfigurationError("Matching configuration is empty", location=config_path)

    try:
        if config_path.suffix.lower() == ".json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to parse matching configuration: {e}",
            location=config_path,
            suggestions=["Validate the document with a JSON/YAML linter"],
        )

    if not isinstance(document, dict):
        raise ConfigurationError(
            "Matching configuration must be a mapping at the top level",
            errors=[f"Got {type(document).__name__}"],
            location=config_path,
        )

    return document


def build_matching_config(document: Dict[str, Any]) -> Tuple[MatchingConfig, List[str]]:
    """
    Merge a parsed document over the built-in defaults.

    Each section is merged field by field: a field that is absent keeps its
    default silently, a field that fails validation keeps its default and
    produces a problem message. A section that is not a mapping is replaced
    by its defaults as a whole.

    Args:
        document: Parsed configuration mapping

    Returns:
        Tuple of (MatchingConfig, list of problems found while merging)
    """
    problems: List[str] = []
    sections = {
        name: _build_section(name, model_cls, document.get(name), problems)
        for name, model_cls in _SECTIONS.items()
    }
    return MatchingConfig(**sections), problems


def _build_section(
    name: str, model_cls: Type[BaseModel], raw: Any, problems: List[str]
) -> BaseModel:
    """Validate one section, dropping each invalid field individually."""
    if raw is None:
        return model_cls()

    if not isinstance(raw, dict):
        problems.append(f"Section '{name}' must be a mapping, got {type(raw).__name__}; using defaults")
        return model_cls()

    accepted: Dict[str, Any] = {}
    for field_name, field_info in model_cls.model_fields.items():
        key = field_info.alias or field_name
        if key in raw:
            value = raw[key]
        elif field_name in raw:
            value = raw[field_name]
        else:
            continue

        try:
            model_cls.model_validate({field_name: value})
        except ValidationError as e:
            reason = e.errors()[0]["msg"]
            problems.append(f"{name} -> {key}: {reason}; using default")
            continue
        accepted[field_name] = value

    return model_cls.model_validate(accepted)


def load_matching_config(
    config_path: Optional[Union[str, Path]] = None,
) -> Tuple[MatchingConfig, List[str]]:
    """
    Load a matching configuration from a resource.

    Args:
        config_path: Optional explicit location (see resolve_config_location)

    Returns:
        Tuple of (MatchingConfig, list of per-field problems)

    Raises:
        ConfigurationError: If the resource cannot be read or parsed
    """
    location = resolve_config_location(config_path)
    document = read_config_document(location)
    return build_matching_config(document)
