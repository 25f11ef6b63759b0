"""Core domain models shared by the SMTP session and the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MarkupDialect(str, Enum):
    """Telegram ``parse_mode`` values supported for forwarded messages."""

    MARKDOWN_V2 = "MarkdownV2"
    HTML = "HTML"

    @classmethod
    def parse(cls, value: object) -> MarkupDialect:
        """Resolve ``value`` case-insensitively, defaulting to MarkdownV2."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return cls.MARKDOWN_V2


class SessionPhase(Enum):
    """Progress of one SMTP connection through the mail transaction."""

    INIT = "init"
    GREETED = "greeted"
    HAS_SENDER = "has_sender"
    HAS_RECIPIENT = "has_recipient"
    RECEIVING_DATA = "receiving_data"
    DONE = "done"
    CLOSED = "closed"


class HeaderStatus(Enum):
    """Outcome of feeding one header line to the extractor."""

    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


@dataclass(slots=True)
class ParsedFields:
    """Header values captured from the DATA section of a message."""

    sender: str = ""
    recipient: str = ""
    subject: str = ""

    @property
    def is_complete(self) -> bool:
        """Return ``True`` once every tracked header has a value."""
        return bool(self.sender and self.recipient and self.subject)


@dataclass(frozen=True, slots=True)
class RenderedMessage:
    """Chat text ready for delivery together with its markup dialect."""

    text: str
    dialect: MarkupDialect


__all__ = [
    "HeaderStatus",
    "MarkupDialect",
    "ParsedFields",
    "RenderedMessage",
    "SessionPhase",
]
