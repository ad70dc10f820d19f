"""Centralized configuration using pydantic-settings.

Values can be overridden via environment variables with TREESTAMP_ prefix.

Example:
    TREESTAMP_RENDER__DEFAULT_ENCODING="utf-16"
    TREESTAMP_CLI__CONFIRM_OVERWRITE=false
"""

import codecs

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderSettings(BaseSettings):
    """Template rendering and file writing."""

    model_config = SettingsConfigDict(env_prefix="TREESTAMP_RENDER__")

    default_encoding: str = Field(
        default="utf-8",
        description="Encoding for file entries that do not declare one",
    )

    @field_validator("default_encoding")
    @classmethod
    def _known_codec(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {value}") from exc
        return value


class CliSettings(BaseSettings):
    """Command-line defaults."""

    model_config = SettingsConfigDict(env_prefix="TREESTAMP_CLI__")

    manifest_filename: str = Field(
        default="treestamp.yaml",
        description="Manifest looked up in the working directory when -m is omitted",
    )
    log_level: str = Field(default="WARNING", description="Logging level without --verbose")
    confirm_overwrite: bool = Field(
        default=True,
        description="Prompt before --force removes an existing root",
    )


class CaptureSettings(BaseSettings):
    """Template directory capture."""

    model_config = SettingsConfigDict(env_prefix="TREESTAMP_CAPTURE__")

    ignored_names: list[str] = Field(
        default_factory=lambda: [".git", "__pycache__", ".DS_Store", "node_modules"],
        description="File and directory names skipped when capturing a template directory",
    )


class TreestampSettings(BaseSettings):
    """Root configuration.

    Nested settings use double underscore: TREESTAMP_CLI__LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="TREESTAMP_",
        env_nested_delimiter="__",
    )

    render: RenderSettings = Field(default_factory=RenderSettings)
    cli: CliSettings = Field(default_factory=CliSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)


# Singleton instance
settings = TreestampSettings()


def reload_settings() -> TreestampSettings:
    """Rebuild the singleton, e.g. after a .env file was loaded."""
    global settings
    settings = TreestampSettings()
    return settings
