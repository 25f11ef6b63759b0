"""Tests for the Telegram notifier."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from smtp2tg.core.config import TelegramSettings
from smtp2tg.core.models import MarkupDialect, RenderedMessage
from smtp2tg.transport import TelegramError, TelegramNotifier

TOKEN = "123456:secret-token"


def _settings(**overrides: object) -> TelegramSettings:
    values: dict[str, object] = {"token": TOKEN, "chat_id": "-100987"}
    values.update(overrides)
    return TelegramSettings.model_validate(values)


def _client(handler) -> httpx.Client:
    return httpx.Client(
        transport=httpx.MockTransport(handler),
        base_url="https://api.telegram.org",
    )


def test_send_posts_json_payload() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True, "result": {}})

    notifier = TelegramNotifier(_settings(), client=_client(handler))

    delivered = notifier.send(RenderedMessage("<b>hi</b>", MarkupDialect.HTML))

    assert delivered is True
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == f"/bot{TOKEN}/sendMessage"
    assert json.loads(request.content) == {
        "chat_id": "-100987",
        "text": "<b>hi</b>",
        "parse_mode": "HTML",
    }


def test_non_2xx_response_reports_failure(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"ok": False, "description": "Bad Request: can't parse entities"},
        )

    notifier = TelegramNotifier(_settings(), client=_client(handler))

    with caplog.at_level(logging.ERROR):
        delivered = notifier.send(RenderedMessage("*x", MarkupDialect.MARKDOWN_V2))

    assert delivered is False
    assert "can't parse entities" in caplog.text
    assert TOKEN not in caplog.text


def test_transport_error_reports_failure_without_leaking_token(
    caplog: pytest.LogCaptureFixture,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier = TelegramNotifier(_settings(), client=_client(handler))

    with caplog.at_level(logging.ERROR):
        delivered = notifier.send(RenderedMessage("x", MarkupDialect.MARKDOWN_V2))

    assert delivered is False
    assert "ConnectError" in caplog.text
    assert TOKEN not in caplog.text


def test_missing_credentials_are_rejected() -> None:
    with pytest.raises(TelegramError):
        TelegramNotifier(_settings(chat_id=None))


def test_owned_client_is_closed_on_exit() -> None:
    with TelegramNotifier(_settings()) as notifier:
        client = notifier._client  # pylint: disable=protected-access
        assert client.base_url.host == "api.telegram.org"

    assert client.is_closed


def test_injected_client_is_left_open() -> None:
    client = _client(lambda request: httpx.Response(200))

    with TelegramNotifier(_settings(), client=client):
        pass

    assert not client.is_closed
    client.close()
