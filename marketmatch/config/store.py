"""Time-to-live cache around the matching configuration resource.

The store is read-mostly: callers get the cached, immutable MatchingConfig
without locking. When the cache is empty or expired, one caller reloads
behind a lock while concurrent callers wait and then reuse the fresh value.
A failed load never reaches the caller; the built-in defaults are cached for
a full TTL instead.
"""

import threading
import time
from decimal import Decimal
from pathlib import Path
from typing import Callable, NamedTuple, Optional, Union

from marketmatch.logging import get_logger

from .environment import EnvironmentConfig
from .exceptions import ConfigurationError
from .loader import load_matching_config, resolve_config_location
from .models import MatchingConfig
from .validators import check_for_warnings, emit_warnings

logger = get_logger(__name__, component="config")

DEFAULT_TTL_SECONDS = 300.0


class _CacheEntry(NamedTuple):
    config: MatchingConfig
    loaded_at: float
    source: Optional[Path]


class ConfigStore:
    """Owns the cached matching configuration and its reload policy."""

    def __init__(
        self,
        location: Optional[Union[str, Path]] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the store.

        Args:
            location: Explicit config location; when None it is resolved on
                every reload so environment changes are picked up
            ttl_seconds: How long a loaded configuration stays valid
            clock: Monotonic time source (injectable for tests)
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._location = location
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: Optional[_CacheEntry] = None
        self.reload_count = 0

    @classmethod
    def from_environment(cls, environment: EnvironmentConfig) -> "ConfigStore":
        """Build a store from the location and TTL in the environment config."""
        return cls(
            location=environment.matching_config_location,
            ttl_seconds=environment.config_cache_ttl_seconds,
        )

    def get_config(self) -> MatchingConfig:
        """Return the current configuration, reloading it if expired."""
        entry = self._entry
        if entry is not None and not self._expired(entry):
            return entry.config

        with self._lock:
            # Another thread may have reloaded while we waited.
            entry = self._entry
            if entry is None or self._expired(entry):
                entry = self._reload()
                self._entry = entry
            return entry.config

    def invalidate(self) -> None:
        """Drop the cached configuration so the next read reloads it."""
        with self._lock:
            self._entry = None
        logger.debug("Matching config cache invalidated", extra={"event": "config.invalidated"})

    def get_default_min_score(self) -> Decimal:
        """Return the configured default minimum composite score."""
        return self.get_config().thresholds.default_min_score

    @property
    def loaded_from(self) -> Optional[Path]:
        """Path of the resource behind the cached config, None for defaults."""
        entry = self._entry
        return entry.source if entry is not None else None

    def _expired(self, entry: _CacheEntry) -> bool:
        return (self._clock() - entry.loaded_at) >= self._ttl_seconds

    def _reload(self) -> _CacheEntry:
        """Load the configuration resource; must be called with the lock held."""
        now = self._clock()
        location = resolve_config_location(self._location)
        self.reload_count += 1

        try:
            config, problems = load_matching_config(location)
        except ConfigurationError as e:
            logger.warning(
                f"Unable to load matching config from {location}: {e.message}; using defaults",
                extra={
                    "event": "config.load_failed",
                    "config_location": str(location),
                    "errors": e.errors,
                },
            )
            return _CacheEntry(MatchingConfig.defaults(), now, None)

        emit_warnings(problems, location=str(location))
        emit_warnings(check_for_warnings(config), location=str(location))

        logger.info(
            "Matching config loaded",
            extra={
                "event": "config.reloaded",
                "config_location": str(location),
                "ignored_fields": len(problems),
            },
        )
        return _CacheEntry(config, now, location)
