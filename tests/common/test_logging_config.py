"""Tests for logging configuration."""

import pytest
from pydantic import ValidationError
from shared_mime.common.logging_config import LoggingConfig


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_valid_config(self):
        """Test valid logging configuration."""
        config = LoggingConfig(level="INFO", format="json")
        assert config.level == "INFO"
        assert config.format == "json"

    def test_default_values(self):
        """Library defaults stay quiet: warnings only, simple format."""
        config = LoggingConfig()
        assert config.level == "WARNING"
        assert config.format == "simple"
        assert config.file is None

    def test_rejects_invalid_log_level(self):
        """Test that invalid log levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")

        with pytest.raises(ValidationError):
            LoggingConfig(level="CRITICAL")

    def test_rejects_invalid_format(self):
        """Test that invalid formats are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_case_insensitive_log_level(self):
        """Test that log level is case-insensitive."""
        config = LoggingConfig(level="info")
        assert config.level == "INFO"

        config = LoggingConfig(level="Debug")
        assert config.level == "DEBUG"

    def test_case_insensitive_format(self):
        """Test that format is case-insensitive."""
        config = LoggingConfig(format="JSON")
        assert config.format == "json"

        config = LoggingConfig(format="Detailed")
        assert config.format == "detailed"

    def test_rejects_unknown_fields(self):
        """Test that typos in config keys are not silently ignored."""
        with pytest.raises(ValidationError):
            LoggingConfig(levle="INFO")

    def test_serialization(self):
        """Test that config can be serialized."""
        config = LoggingConfig(level="DEBUG", format="detailed", file="/tmp/mime.log")
        data = config.model_dump()

        assert data == {
            "level": "DEBUG",
            "format": "detailed",
            "file": "/tmp/mime.log",
        }
