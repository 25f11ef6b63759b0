"""SMTP protocol handling: per-connection sessions and the acceptor."""

from .server import SmtpGatewayServer, SmtpRequestHandler, serve
from .session import SERVER_NAME, SmtpSession

__all__ = [
    "SERVER_NAME",
    "SmtpGatewayServer",
    "SmtpRequestHandler",
    "SmtpSession",
    "serve",
]
