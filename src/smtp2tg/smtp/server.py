"""Threaded TCP acceptor that runs one :class:`SmtpSession` per connection."""

from __future__ import annotations

import logging
import socketserver

from ..core.config import AppSettings
from ..core.interfaces import Notifier
from ..rendering import MessageRenderer
from .session import SmtpSession

LOGGER = logging.getLogger(__name__)


class SmtpRequestHandler(socketserver.StreamRequestHandler):
    """Run a session on an accepted socket; errors end only this connection."""

    server: SmtpGatewayServer

    def setup(self) -> None:
        """Apply the idle timeout before the stream wrappers are created."""
        timeout = self.server.settings.server.idle_timeout_seconds
        self.timeout = timeout or None
        super().setup()

    def handle(self) -> None:
        """Serve the SMTP conversation until QUIT, EOF or a socket error."""
        peer = "%s:%s" % self.client_address[:2]
        LOGGER.info("Connection accepted from %s", peer)
        settings = self.server.settings
        session = SmtpSession(
            self.rfile,
            self.wfile,
            renderer=self.server.renderer,
            notifier=self.server.notifier,
            dialect=settings.telegram.parse_mode,
            max_body_chars=settings.server.max_body_chars,
            peer=peer,
        )
        try:
            session.run()
        except TimeoutError:
            LOGGER.info("Closing idle connection from %s", peer)
        except OSError as exc:
            LOGGER.warning("Connection from %s aborted: %s", peer, exc)
        else:
            LOGGER.info(
                "Connection from %s closed after %d message(s)",
                peer,
                session.messages_accepted,
            )


class SmtpGatewayServer(socketserver.ThreadingTCPServer):
    """Listening socket shared by all sessions.

    The renderer, notifier and settings are read-only after construction and
    are shared by every handler thread.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        settings: AppSettings,
        notifier: Notifier,
        *,
        renderer: MessageRenderer | None = None,
        bind_and_activate: bool = True,
    ) -> None:
        """Bind to ``settings.server.host``/``port`` and store shared services."""
        self.settings = settings
        self.notifier = notifier
        self.renderer = renderer or MessageRenderer()
        address = (settings.server.host, settings.server.port)
        super().__init__(address, SmtpRequestHandler, bind_and_activate)

    def handle_error(self, request: object, client_address: object) -> None:
        """Log unexpected handler failures without touching other sessions."""
        LOGGER.exception("Unhandled error while serving %s", client_address)


def serve(settings: AppSettings, notifier: Notifier) -> None:
    """Accept connections until interrupted."""
    with SmtpGatewayServer(settings, notifier) as server:
        host, port = server.server_address[:2]
        LOGGER.info("SMTP server running on %s:%s", host, port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            LOGGER.info("Shutting down SMTP server")


__all__ = ["SmtpGatewayServer", "SmtpRequestHandler", "serve"]
