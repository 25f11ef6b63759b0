"""End-to-end tests driving the threaded SMTP acceptor over real sockets."""

from __future__ import annotations

import smtplib
import socket
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from smtp2tg.core.config import AppSettings
from smtp2tg.core.models import MarkupDialect, RenderedMessage
from smtp2tg.smtp import SmtpGatewayServer


class RecordingNotifier:
    """Thread-safe notifier stub."""

    def __init__(self) -> None:
        self.messages: list[RenderedMessage] = []
        self._lock = threading.Lock()

    def send(self, message: RenderedMessage) -> bool:
        with self._lock:
            self.messages.append(message)
        return True


def _settings(**server: object) -> AppSettings:
    return AppSettings.model_validate(
        {
            "telegram": {"token": "t", "chat_id": "c", "parse_mode": "HTML"},
            "server": {"host": "127.0.0.1", "port": 0, **server},
        }
    )


@contextmanager
def _serve(
    settings: AppSettings, notifier: RecordingNotifier
) -> Iterator[tuple[str, int]]:
    server = SmtpGatewayServer(settings, notifier)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield host, port
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


MESSAGE = (
    "From: alice@example.com\r\n"
    "To: bob@example.com\r\n"
    "Subject: <b>test</b>\r\n"
    "\r\n"
    "hello from smtplib\r\n"
    ".leading dot survives\r\n"
)


def test_smtplib_client_delivers_message() -> None:
    notifier = RecordingNotifier()

    with _serve(_settings(), notifier) as (host, port):
        with smtplib.SMTP(host, port, timeout=5) as client:
            refused = client.sendmail(
                "alice@example.com", ["bob@example.com"], MESSAGE
            )

    assert refused == {}
    assert len(notifier.messages) == 1
    message = notifier.messages[0]
    assert message.dialect is MarkupDialect.HTML
    assert "&lt;b&gt;test&lt;/b&gt;" in message.text
    assert "hello from smtplib" in message.text
    assert ".leading dot survives" in message.text


def test_protocol_errors_are_reported_to_client() -> None:
    notifier = RecordingNotifier()

    with _serve(_settings(), notifier) as (host, port):
        with smtplib.SMTP(host, port, timeout=5) as client:
            assert client.docmd("FOO")[0] == 502
            assert client.docmd("RCPT TO:<b@example.com>")[0] == 503
            assert client.docmd("DATA")[0] == 503
            assert client.noop()[0] == 250

    assert notifier.messages == []


def test_idle_connection_does_not_block_other_sessions() -> None:
    notifier = RecordingNotifier()

    with _serve(_settings(idle_timeout_seconds=0.5), notifier) as (host, port):
        with socket.create_connection((host, port), timeout=5) as idle:
            reader = idle.makefile("rb")
            assert reader.readline().startswith(b"220")

            with smtplib.SMTP(host, port, timeout=5) as client:
                client.sendmail("a@example.com", ["b@example.com"], MESSAGE)

            # The server drops the silent client once the idle timeout expires.
            assert reader.readline() == b""
            reader.close()

    assert len(notifier.messages) == 1
