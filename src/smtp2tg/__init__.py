"""Forward mail received over SMTP to a Telegram chat."""

__version__ = "0.1.0"
