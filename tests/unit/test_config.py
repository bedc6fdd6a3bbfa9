"""
Unit tests for server configuration.
"""

from pathlib import Path

import pytest

from minihttp.config import ConfigurationError, MissingDirectoryError, ServerConfig


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        """Test the default values."""
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 4221
        assert config.workers == 4
        assert config.timeout is None
        assert config.directory is None
        assert config.sandbox_files is True
        assert config.log_format == "text"
        config.validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"workers": 0},
        {"backlog": 0},
        {"timeout": 0},
        {"timeout": -2.5},
        {"log_format": "xml"},
    ])
    def test_invalid_values(self, overrides):
        """Test that out-of-range values fail validation."""
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_missing_directory_rejected(self, tmp_path: Path):
        """A configured directory must exist at startup."""
        with pytest.raises(ValueError, match="does not exist"):
            ServerConfig(directory=str(tmp_path / "absent")).validate()

    def test_existing_directory_accepted(self, serving_dir: Path):
        ServerConfig(directory=str(serving_dir)).validate()


class TestFromEnv:
    """Tests for environment-variable configuration."""

    def test_reads_environment(self, monkeypatch, serving_dir: Path):
        """Test that every HTTP_* variable is picked up."""
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("HTTP_PORT", "8080")
        monkeypatch.setenv("HTTP_WORKERS", "8")
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_DIRECTORY", str(serving_dir))
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("HTTP_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.workers == 8
        assert config.timeout == 2.5
        assert config.directory == str(serving_dir)
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_defaults_when_unset(self, monkeypatch):
        """Test fallbacks when no variables are set."""
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_WORKERS", "HTTP_TIMEOUT",
                     "HTTP_DIRECTORY", "HTTP_LOG_LEVEL", "HTTP_LOG_FORMAT", "HTTP_NO_SANDBOX"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    @pytest.mark.parametrize("value,sandboxed", [
        ("1", False),
        ("TRUE", False),
        (" yes ", False),
        ("on", False),
        ("0", True),
        ("false", True),
        ("", True),
    ])
    def test_no_sandbox(self, monkeypatch, value: str, sandboxed: bool):
        """HTTP_NO_SANDBOX turns off the /files/* sandbox."""
        monkeypatch.setenv("HTTP_NO_SANDBOX", value)
        assert ServerConfig.from_env().sandbox_files is sandboxed

    def test_empty_directory_means_none(self, monkeypatch):
        monkeypatch.setenv("HTTP_DIRECTORY", "")
        assert ServerConfig.from_env().directory is None


class TestConfigurationErrors:
    """Tests for the configuration exception hierarchy."""

    def test_missing_directory_is_configuration_error(self):
        error = MissingDirectoryError()

        assert isinstance(error, ConfigurationError)
        assert str(error) == "No serving directory configured"
