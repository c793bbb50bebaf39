# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Silos settings, loaded from init arguments, `SILOS_*` environment variables, and TOML files."""

from __future__ import annotations

import logging

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, NonNegativeInt, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from silos._common import BasedModel


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_REVISION = "main"

type EmbeddingProviderName = Literal["sentence-transformers", "fastembed"]
type LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EmbeddingSettings(BasedModel):
    """Which local model embeds descriptions and prompts."""

    provider: EmbeddingProviderName = "sentence-transformers"
    """The embedding backend. FastEmbed needs the `fastembed` extra."""
    model_id: str | None = None
    """A Hugging Face model id. Defaults to all-MiniLM-L6-v2."""
    revision: str | None = None
    """Revision or branch of the model. Defaults to `main`."""
    gpu: NonNegativeInt | None = None
    """Run on the Nth GPU device instead of the CPU."""

    def resolve_model_and_revision(self) -> tuple[str, str]:
        """The model id and revision to load, with defaults filled in."""
        return self.model_id or DEFAULT_MODEL, self.revision or DEFAULT_REVISION

    @property
    def device(self) -> str:
        return "cpu" if self.gpu is None else f"cuda:{self.gpu}"


class ServerSettings(BasedModel):
    """HTTP server binding."""

    host: str = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535)] = 8080


class LoggingSettings(BasedModel):
    """Log level and handler."""

    level: LogLevel = "INFO"
    rich: bool = True
    """Use rich's log handler instead of plain stderr logging."""


class SilosSettings(BaseSettings):
    """Settings for the Silos server and CLI.

    Configuration precedence (highest to lowest):
    1. Init arguments
    2. Environment variables (SILOS_*, nested with `__`, e.g. SILOS_EMBEDDING__MODEL_ID)
    3. `silos.toml` then `.silos.toml` in the working directory
    4. Defaults
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        env_nested_delimiter="__",
        env_prefix="SILOS_",
        extra="ignore",
        nested_model_default_partial_update=True,
        str_strip_whitespace=True,
        title="Silos Settings",
        use_attribute_docstrings=True,
        validate_assignment=True,
    )

    snippets_path: Path = Path("./snippets")
    """Corpus root holding `generate/` and `refactor/` rule directories."""
    rule_extensions: tuple[str, ...] = (".kdl", ".rule")
    """File extensions treated as rule files."""
    embedding: EmbeddingSettings = EmbeddingSettings()
    strict_corpus: bool = True
    """Fail startup on a malformed rule file. When false, bad files are skipped with a warning."""
    lock_timeout: PositiveFloat = 30.0
    """Seconds to wait for the shared embed-and-search lock before failing as busy."""
    default_top_k: PositiveInt = 1
    """Number of results when a request doesn't say."""
    server: ServerSettings = ServerSettings()
    logging: LoggingSettings = LoggingSettings()

    @field_validator("rule_extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(ext.strip() for ext in value.split(",") if ext.strip())
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Init args, then environment, then TOML config files."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, Path("silos.toml")),
            TomlConfigSettingsSource(settings_cls, Path(".silos.toml")),
        )


def _merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif value is not None:
            merged[key] = value
    return merged


# Global settings instance
_settings: SilosSettings | None = None
"""The global settings instance. Use `get_settings()` to access it."""


def get_settings() -> SilosSettings:
    """Get the global settings instance, creating it from the configuration sources if needed."""
    global _settings
    if _settings is None:
        _settings = SilosSettings()
    return _settings


def update_settings(**kwargs: Any) -> SilosSettings:
    """Update the global settings instance.

    Nested sections merge, so `update_settings(embedding={"gpu": 0})` keeps the configured
    model. `None` values are ignored, which lets CLI flags pass through unset options.
    """
    global _settings
    current = get_settings()
    _settings = SilosSettings(**_merge(current.model_dump(), kwargs))
    logger.debug("Settings updated: %s", sorted(k for k, v in kwargs.items() if v is not None))
    return _settings


def reset_settings() -> None:
    """Drop the global settings instance; the next access reloads from configuration sources."""
    global _settings
    _settings = None


__all__ = (
    "DEFAULT_MODEL",
    "DEFAULT_REVISION",
    "EmbeddingSettings",
    "LoggingSettings",
    "ServerSettings",
    "SilosSettings",
    "get_settings",
    "reset_settings",
    "update_settings",
)
