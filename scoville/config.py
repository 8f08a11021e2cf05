"""Configuration management for the Scoville client."""

import os
import threading
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.scoville.app"


class APISettings(BaseSettings):
    """Backend API settings."""

    url: str = Field(default=DEFAULT_BASE_URL, description="Scoville API base URL")
    timeout: float = Field(default=10.0, description="HTTP timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="SCOVILLE_API_", extra="ignore")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store the base URL without a trailing slash."""
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """Host application identity overrides."""

    bundle_id: Optional[str] = Field(default=None, description="Application identifier")
    version: Optional[str] = Field(default=None, description="Application version")
    build: Optional[str] = Field(default=None, description="Application build number")
    platform: str = Field(default="python", description="Platform reported on device registration")

    model_config = SettingsConfigDict(env_prefix="SCOVILLE_APP_", extra="ignore")


class StorageSettings(BaseSettings):
    """Device identifier storage."""

    service_name: str = Field(default="com.scoville.kit", description="Keyring service name")
    key: str = Field(default="scoville_device_uuid", description="Keyring entry holding the device UUID")

    model_config = SettingsConfigDict(env_prefix="SCOVILLE_STORAGE_", extra="ignore")


class LoggingSettings(BaseSettings):
    """Logging settings used by setup_logging()."""

    level: str = Field(default="INFO", description="Log level")
    file: Optional[str] = Field(default=None, description="Optional rotating log file path")

    model_config = SettingsConfigDict(env_prefix="SCOVILLE_LOGGING_", extra="ignore")

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()


class ScovilleSettings(BaseSettings):
    """Main client settings."""

    api: APISettings = Field(default_factory=APISettings)
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="SCOVILLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, config_path: Path) -> "ScovilleSettings":
        """Load settings from YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        return cls(**data if data else {})

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get default configuration file path."""
        return Path.home() / ".config/scoville/config.yaml"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "ScovilleSettings":
        """
        Load settings from file or environment variables.

        Priority (highest to lowest):
        1. Specified config_path
        2. SCOVILLE_CONFIG_PATH environment variable
        3. Default config location
        4. Environment variables
        5. Default values
        """
        if config_path is None:
            env_config_path = os.getenv("SCOVILLE_CONFIG_PATH")
            if env_config_path:
                config_path = Path(env_config_path)

        if config_path is None:
            config_path = cls.get_default_config_path()

        if config_path.exists():
            return cls.from_yaml(config_path)
        return cls()

    @classmethod
    def defaults(cls) -> "ScovilleSettings":
        """Built-in defaults. Ignores environment variables and config files."""
        return cls.model_construct(
            api=APISettings.model_construct(),
            app=AppSettings.model_construct(),
            storage=StorageSettings.model_construct(),
            logging=LoggingSettings.model_construct(),
        )


class Configuration(BaseModel):
    """Active client configuration. Built once per configure() call, never mutated."""

    api_key: str
    bundle_id: str
    version: str
    build: str
    device_uuid: str

    model_config = ConfigDict(frozen=True)


class ConfigurationStore:
    """
    Single slot holding the active Configuration, or None when unconfigured.

    set() overwrites unconditionally (last write wins). The lock makes every
    read observe either the previous or the new value.
    """

    def __init__(self, configuration: Optional[Configuration] = None):
        self._lock = threading.Lock()
        self._configuration = configuration

    def set(self, configuration: Configuration) -> None:
        with self._lock:
            self._configuration = configuration

    def get(self) -> Optional[Configuration]:
        with self._lock:
            return self._configuration

    def clear(self) -> None:
        with self._lock:
            self._configuration = None

    @property
    def is_configured(self) -> bool:
        return self.get() is not None
