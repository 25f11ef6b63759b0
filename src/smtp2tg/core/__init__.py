"""Core utilities for configuration, logging, and shared models."""

from .config import (
    AppSettings,
    ConfigurationError,
    LoggingSettings,
    ServerSettings,
    TelegramSettings,
    ensure_required,
    load_app_settings,
)
from .interfaces import Notifier
from .logging import configure_logging
from .models import (
    HeaderStatus,
    MarkupDialect,
    ParsedFields,
    RenderedMessage,
    SessionPhase,
)

__all__ = [
    "AppSettings",
    "ConfigurationError",
    "HeaderStatus",
    "LoggingSettings",
    "MarkupDialect",
    "Notifier",
    "ParsedFields",
    "RenderedMessage",
    "ServerSettings",
    "SessionPhase",
    "TelegramSettings",
    "configure_logging",
    "ensure_required",
    "load_app_settings",
]
