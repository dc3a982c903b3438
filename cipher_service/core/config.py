"""Application configuration management."""
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

ENV_PREFIX = "CIPHER_SERVICE_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"
DEFAULT_PORT = 8081
DEFAULT_SAMPLE_INTERVAL = 10.0
# Compiled-in key material of the deployed service; override through the
# environment or app.json.
DEFAULT_CIPHER_KEY = "verysecretkey123"
DEFAULT_CIPHER_IV = "uniqueinitvector"


def _get_config_file_path() -> Path:
    """Get the absolute path to the optional app.json configuration file."""
    override = os.environ.get(CONFIG_FILE_ENV)
    if override:
        return Path(override)
    project_root = Path(__file__).parent.parent.parent
    return project_root / "app.json"


class Settings(BaseSettings):
    """Resolved application settings used by the service registry."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        extra="ignore",
    )

    host: str = Field("0.0.0.0", description="Application bind address")
    port: int = Field(DEFAULT_PORT, description="Application bind port")
    log_level: str = Field("INFO", description="Root logging level")
    cipher_key: SecretStr = Field(
        SecretStr(DEFAULT_CIPHER_KEY),
        description="16-byte AES-128 key (UTF-8 text)",
    )
    cipher_iv: SecretStr = Field(
        SecretStr(DEFAULT_CIPHER_IV),
        description="16-byte CBC initialization vector (UTF-8 text)",
    )
    sample_interval: float = Field(
        DEFAULT_SAMPLE_INTERVAL,
        gt=0,
        description="Seconds between two memory samples",
    )
    memory_source: Literal["process", "system"] = Field(
        "process",
        description="Measure this process' resident memory or used system memory",
    )
    metrics_namespace: str = Field("app", description="Prefix of the exported gauges")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls, json_file=_get_config_file_path()),
            file_secret_settings,
        )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return a cached Settings instance (blocking, use at startup only)."""

    return Settings()
