"""Settings for :mod:`csv_exec`.

Settings are defined in one place (this file) and loaded using `pydantic-settings`.

Supported sources (lowest → highest precedence):
1) `settings.toml` (current working directory)
2) `.env` (current working directory)
3) environment variables (prefix: `CSV_EXEC_`)
4) explicit overrides (`Settings(...)` / CLI)

`settings.toml` is flat: keys map 1:1 to `Settings` fields.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

from csv_exec.models.run import DEFAULT_ARG_REGEX, DEFAULT_NEW_COLUMN_NAME

ENV_PREFIX = "CSV_EXEC_"


def _coerce_log_level(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("log_level must be an int or a log level name")

    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return logging.WARNING

    if text.isdigit():
        return int(text)

    mapped = logging.getLevelNamesMapping().get(text.upper())
    if isinstance(mapped, int):
        return mapped

    raise ValueError(f"Invalid log_level: {value!r}")


class Settings(BaseSettings):
    """Defaults for run options and logging."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix=ENV_PREFIX,
        env_file=".env",
    )

    # CSV dialect
    delimiter: str = Field(default=",")
    quote: str = Field(default='"')
    has_header: bool = Field(default=True)

    # Templating
    arg_regex: str = Field(default=DEFAULT_ARG_REGEX)
    new_column_name: str = Field(default=DEFAULT_NEW_COLUMN_NAME)
    strict_placeholders: bool = Field(default=False)
    fail_on_exit_status: bool = Field(default=False)

    # Logging (stderr only; stdout carries data)
    log_format: Literal["text", "ndjson"] = Field(default="text")
    log_level: int = Field(default=logging.WARNING)

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> int:
        return _coerce_log_level(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_settings = TomlConfigSettingsSource(settings_cls, toml_file=Path.cwd() / "settings.toml")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            toml_settings,
            file_secret_settings,
        )


__all__ = ["ENV_PREFIX", "Settings"]
