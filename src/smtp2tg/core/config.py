"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator

from .models import MarkupDialect


class ConfigurationError(ValueError):
    """Raised when required startup configuration is missing."""


class TelegramSettings(BaseModel):
    """Settings for the Telegram Bot API destination."""

    token: str | None = Field(default=None, description="Telegram bot token")
    chat_id: str | None = Field(default=None, description="Destination chat id")
    parse_mode: MarkupDialect = Field(
        default=MarkupDialect.MARKDOWN_V2,
        description="Markup dialect used for forwarded messages",
    )
    api_base_url: str = Field(
        default="https://api.telegram.org", description="Bot API base URL"
    )
    timeout_seconds: float = Field(
        default=15.0, gt=0, description="Timeout for Bot API requests"
    )
    max_keepalive_connections: int = Field(
        default=10, ge=1, description="Idle connections kept in the HTTP pool"
    )

    @field_validator("parse_mode", mode="before")
    @classmethod
    def _coerce_parse_mode(cls, value: Any) -> MarkupDialect:
        return MarkupDialect.parse(value)


class ServerSettings(BaseModel):
    """Settings for the listening SMTP socket."""

    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=2525, ge=0, le=65535, description="TCP port")
    idle_timeout_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Seconds a client may stay silent; 0 disables the timeout",
    )
    max_body_chars: int = Field(
        default=3000, ge=1, description="Cap for the captured body snippet"
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle JSON structured logging"
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    verbose: bool = Field(default=False, description="Log SMTP traffic at DEBUG")

    def missing_required(self) -> list[str]:
        """Return the names of required settings that are unset or blank."""
        missing: list[str] = []
        if not (self.telegram.token or "").strip():
            missing.append("telegram.token")
        if not (self.telegram.chat_id or "").strip():
            missing.append("telegram.chat_id")
        return missing


ENV_PREFIX = "SMTP2TG_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _normalize_value(value: Any) -> Any:
    if isinstance(value, str) and value == "":
        return None
    if isinstance(value, str):
        lowercase_value = value.lower()
        if lowercase_value == "true":
            return True
        if lowercase_value == "false":
            return False
    return value


def _collect_env_values(
    env_file: Path | str | None, include_environment: bool
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined: dict[str, Any] = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        _merge_into_tree(collected, path, _normalize_value(value))

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides.

    Override keys follow the environment layout without the prefix, e.g.
    ``telegram__token="..."`` or ``verbose=True``. ``None`` overrides are
    skipped so unset CLI flags do not mask file or environment values.
    """
    collected = _collect_env_values(env_file, include_environment)
    for key, value in overrides.items():
        if value is None:
            continue
        path = _normalize_key(key)
        if path:
            _merge_into_tree(collected, path, value)
    return AppSettings.model_validate(collected)


def ensure_required(settings: AppSettings) -> AppSettings:
    """Raise :class:`ConfigurationError` when the destination is not configured."""
    missing = settings.missing_required()
    if missing:
        raise ConfigurationError(
            "Missing required settings: " + ", ".join(sorted(missing))
        )
    return settings


__all__ = [
    "AppSettings",
    "ConfigurationError",
    "ENV_PREFIX",
    "LoggingSettings",
    "ServerSettings",
    "TelegramSettings",
    "ensure_required",
    "load_app_settings",
]
