"""Telegram Bot API notifier used to deliver rendered messages."""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from ..core.config import TelegramSettings
from ..core.models import RenderedMessage

LOGGER = logging.getLogger(__name__)


class TelegramError(RuntimeError):
    """Raised when the notifier is misconfigured."""


class TelegramNotifier:
    """Post rendered messages to ``sendMessage`` over a shared HTTP pool.

    One instance is built at startup and used by every session thread;
    ``httpx.Client`` is safe to share between threads.

    Example:
        >>> settings = TelegramSettings(token="123:abc", chat_id="42")
        >>> with TelegramNotifier(settings) as notifier:
        ...     notifier.send(RenderedMessage("hi", MarkupDialect.HTML))
    """

    def __init__(
        self, settings: TelegramSettings, client: httpx.Client | None = None
    ) -> None:
        """Initialize the notifier.

        Args:
            settings: Destination credentials and HTTP tuning
            client: Optional pre-built client, mainly for tests

        Raises:
            TelegramError: If the token or chat id is missing
        """
        if not settings.token or not settings.chat_id:
            raise TelegramError("Telegram token and chat id must be configured")
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=settings.api_base_url,
            timeout=settings.timeout_seconds,
            limits=httpx.Limits(
                max_keepalive_connections=settings.max_keepalive_connections
            ),
        )

    def __enter__(self) -> TelegramNotifier:
        """Return the notifier for use in a ``with`` block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Release pooled connections."""
        self.close()

    @property
    def endpoint(self) -> str:
        """Path of the ``sendMessage`` method for the configured bot."""
        return f"/bot{self._settings.token}/sendMessage"

    def send(self, message: RenderedMessage) -> bool:
        """Deliver ``message`` to the configured chat.

        Returns:
            ``True`` when the API answered with a 2xx status, ``False`` for any
            HTTP or transport failure. Failures are logged, never retried.
        """
        payload = {
            "chat_id": self._settings.chat_id,
            "text": message.text,
            "parse_mode": message.dialect.value,
        }
        try:
            response = self._client.post(self.endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "Telegram rejected message for chat %s: HTTP %d %s",
                self._settings.chat_id,
                exc.response.status_code,
                _describe_error(exc.response),
            )
            return False
        except httpx.HTTPError as exc:
            # str(exc) may embed the request URL, which carries the token.
            LOGGER.error(
                "Telegram request failed for chat %s: %s",
                self._settings.chat_id,
                type(exc).__name__,
            )
            return False

        LOGGER.info("Telegram message sent to chat %s", self._settings.chat_id)
        return True

    def close(self) -> None:
        """Close the underlying HTTP client if this notifier created it."""
        if self._owns_client:
            self._client.close()


def _describe_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(data, dict) and isinstance(data.get("description"), str):
        return data["description"]
    return response.reason_phrase


__all__ = ["TelegramError", "TelegramNotifier"]
