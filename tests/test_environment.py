"""Tests for environment variable loading and duration parsing."""

import pytest

from marketmatch.config import CONFIG_LOCATION_ENV, ConfigurationError
from marketmatch.config.duration import DurationParseError, parse_duration, validate_duration_range
from marketmatch.config.environment import DEFAULT_DATABASE_URL, load_environment_config


class TestDurationParsing:
    """Test duration string parsing."""

    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("30s", 30),
            ("5m", 300),
            ("2h", 7200),
            ("1d", 86400),
            ("1h30m", 5400),
            ("1H 30M", 5400),
            ("PT5M", 300),
            ("PT1H30M", 5400),
            ("pt45s", 45),
            ("P1D", 86400),
        ],
    )
    def test_valid_durations(self, text, seconds):
        assert parse_duration(text) == seconds

    @pytest.mark.parametrize("text", ["", "   ", "5", "5x", "m5", "five minutes", "P", "PT", "PT5X"])
    def test_invalid_durations(self, text):
        with pytest.raises(DurationParseError):
            parse_duration(text)

    def test_zero_duration_rejected(self):
        with pytest.raises(DurationParseError, match="zero"):
            parse_duration("0m")

    def test_duration_range(self):
        validate_duration_range(300)

        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(90000)
        with pytest.raises(DurationParseError, match="too short"):
            validate_duration_range(5, min_seconds=10)


class TestLoadEnvironmentConfig:
    """Test environment variable loading."""

    def test_defaults(self):
        env = load_environment_config()

        assert env.matching_config_location is None
        assert env.config_cache_ttl_seconds == 300
        assert env.log_level == "INFO"
        assert env.log_format == "key-value"
        assert env.database_url == DEFAULT_DATABASE_URL

    def test_values_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_LOCATION_ENV, str(tmp_path / "matching.yaml"))
        monkeypatch.setenv("MATCHING_CONFIG_TTL", "PT30S")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

        env = load_environment_config()

        assert env.matching_config_location == str(tmp_path / "matching.yaml")
        assert env.config_cache_ttl_seconds == 30
        assert env.log_level == "DEBUG"
        assert env.log_format == "json"
        assert env.database_url == "sqlite:///:memory:"

    def test_all_problems_reported_together(self, monkeypatch):
        monkeypatch.setenv("MATCHING_CONFIG_TTL", "soon")
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        monkeypatch.setenv("LOG_FORMAT", "xml")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        errors = exc_info.value.errors
        assert len(errors) == 3
        assert errors[0].startswith("Invalid MATCHING_CONFIG_TTL")
        assert "LOG_LEVEL" in errors[1]
        assert "LOG_FORMAT" in errors[2]

    def test_ttl_above_one_day_rejected(self, monkeypatch):
        monkeypatch.setenv("MATCHING_CONFIG_TTL", "2d")

        with pytest.raises(ConfigurationError):
            load_environment_config()
