"""Transport adapters for external messaging providers."""

from .telegram_client import TelegramError, TelegramNotifier

__all__ = ["TelegramError", "TelegramNotifier"]
