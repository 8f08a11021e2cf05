"""
Unit tests for configuration module.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from scoville.config import (
    DEFAULT_BASE_URL,
    APISettings,
    AppSettings,
    Configuration,
    ConfigurationStore,
    LoggingSettings,
    ScovilleSettings,
    StorageSettings,
)


def make_configuration(**overrides) -> Configuration:
    values = {
        "api_key": "key1",
        "bundle_id": "com.example.app",
        "version": "1.0.0",
        "build": "1",
        "device_uuid": "device-uuid",
    }
    values.update(overrides)
    return Configuration(**values)


class TestAPISettings:
    """Test API settings."""

    def test_default_values(self):
        """Test API settings have sensible defaults."""
        settings = APISettings()

        assert settings.url == DEFAULT_BASE_URL
        assert settings.timeout == 10.0

    def test_trailing_slash_is_stripped(self):
        settings = APISettings(url="https://staging.example.com/")

        assert settings.url == "https://staging.example.com"

    def test_env_override(self, monkeypatch):
        """Test SCOVILLE_API_* environment variables are honored."""
        monkeypatch.setenv("SCOVILLE_API_URL", "https://env.example.com")
        monkeypatch.setenv("SCOVILLE_API_TIMEOUT", "2.5")

        settings = APISettings()

        assert settings.url == "https://env.example.com"
        assert settings.timeout == 2.5


class TestOtherSections:
    """Test app, storage and logging settings."""

    def test_app_defaults(self):
        settings = AppSettings()

        assert settings.bundle_id is None
        assert settings.version is None
        assert settings.build is None
        assert settings.platform == "python"

    def test_storage_defaults(self):
        settings = StorageSettings()

        assert settings.service_name == "com.scoville.kit"
        assert settings.key == "scoville_device_uuid"

    def test_logging_level_is_uppercased(self):
        settings = LoggingSettings(level="debug")

        assert settings.level == "DEBUG"
        assert settings.file is None


class TestScovilleSettings:
    """Test main settings loading."""

    def test_nested_defaults(self):
        settings = ScovilleSettings()

        assert settings.api.url == DEFAULT_BASE_URL
        assert settings.app.platform == "python"
        assert settings.logging.level == "INFO"

    def test_from_yaml(self, tmp_path: Path):
        """Test loading settings from a YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
api:
  url: http://localhost:8000/
  timeout: 3
app:
  bundle_id: com.example.yaml
  version: 2.0.0
  build: "7"
logging:
  level: warning
"""
        )

        settings = ScovilleSettings.from_yaml(config_file)

        assert settings.api.url == "http://localhost:8000"
        assert settings.api.timeout == 3.0
        assert settings.app.bundle_id == "com.example.yaml"
        assert settings.app.version == "2.0.0"
        assert settings.app.build == "7"
        assert settings.logging.level == "WARNING"

    def test_from_yaml_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        settings = ScovilleSettings.from_yaml(config_file)

        assert settings.api.url == DEFAULT_BASE_URL

    def test_from_yaml_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ScovilleSettings.from_yaml(tmp_path / "missing.yaml")

    def test_load_from_env_config_path(self, tmp_path: Path, monkeypatch):
        """Test SCOVILLE_CONFIG_PATH points load() at a file."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("api:\n  url: https://custom.example.com\n")
        monkeypatch.setenv("SCOVILLE_CONFIG_PATH", str(config_file))

        settings = ScovilleSettings.load()

        assert settings.api.url == "https://custom.example.com"

    def test_load_without_file_uses_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("SCOVILLE_CONFIG_PATH", raising=False)

        with patch.object(
            ScovilleSettings, "get_default_config_path", return_value=tmp_path / "nope.yaml"
        ):
            settings = ScovilleSettings.load()

        assert settings.api.url == DEFAULT_BASE_URL

    def test_explicit_path_wins_over_env(self, tmp_path: Path, monkeypatch):
        env_file = tmp_path / "env.yaml"
        env_file.write_text("api:\n  url: https://env.example.com\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("api:\n  url: https://explicit.example.com\n")
        monkeypatch.setenv("SCOVILLE_CONFIG_PATH", str(env_file))

        settings = ScovilleSettings.load(explicit)

        assert settings.api.url == "https://explicit.example.com"


class TestConfiguration:
    """Test the immutable configuration value."""

    def test_is_frozen(self):
        config = make_configuration()

        with pytest.raises(ValidationError):
            config.api_key = "other"

    def test_equality_by_value(self):
        assert make_configuration() == make_configuration()
        assert make_configuration() != make_configuration(build="2")


class TestConfigurationStore:
    """Test the single-slot configuration store."""

    def test_starts_unconfigured(self):
        store = ConfigurationStore()

        assert store.get() is None
        assert store.is_configured is False

    def test_set_and_get(self):
        store = ConfigurationStore()
        config = make_configuration()

        store.set(config)

        assert store.get() is config
        assert store.is_configured is True

    def test_last_write_wins(self):
        """Each set() replaces the whole value; nothing from earlier writes survives."""
        store = ConfigurationStore()
        store.set(make_configuration(api_key="key1", bundle_id="com.first", build="1"))
        second = make_configuration(api_key="key2", bundle_id="com.second", version="9.9", build="99")

        store.set(second)

        assert store.get() == second

    def test_clear(self):
        store = ConfigurationStore(make_configuration())

        store.clear()

        assert store.get() is None
