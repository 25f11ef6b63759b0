"""Render extracted email fields into Telegram chat markup."""

from __future__ import annotations

import html
import logging
import re

from ..core.models import MarkupDialect, ParsedFields, RenderedMessage

LOGGER = logging.getLogger(__name__)

# Characters Telegram requires to be escaped anywhere in MarkdownV2 text.
MARKDOWN_SPECIAL_CHARS = frozenset("_*[]()~`>#+-=|{}.!\\")

NO_SUBJECT_PLACEHOLDER = "[No Subject]"
TRUNCATION_MARKER = "…"
_MESSAGE_ICON = "\N{INCOMING ENVELOPE}"

_LEADING_QUOTE_MARKERS = re.compile(r"^(?:>[ \t]?)+")
_MARKDOWN_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


def escape_markdown(text: str) -> str:
    """Backslash-escape every MarkdownV2 control character in ``text``."""
    return "".join(
        f"\\{char}" if char in MARKDOWN_SPECIAL_CHARS else char for char in text
    )


def unescape_markdown(text: str) -> str:
    """Reverse :func:`escape_markdown`."""
    return _MARKDOWN_ESCAPE.sub(r"\1", text)


def escape_html(text: str) -> str:
    """Entity-encode ``& < > " '`` in ``text``."""
    return html.escape(text, quote=True)


def prepare_body(body: str) -> str:
    """Trim whitespace and a leading forwarded-quote prefix from ``body``."""
    trimmed = body.strip()
    return _LEADING_QUOTE_MARKERS.sub("", trimmed, count=1).strip()


class MessageRenderer:
    """Build :class:`RenderedMessage` instances for a chosen markup dialect.

    Only dynamic values (subject, addresses, body) are escaped; the template
    text around them is emitted verbatim.
    """

    def render(
        self,
        *,
        subject: str,
        sender: str,
        recipient: str,
        body: str,
        dialect: MarkupDialect | str | None = MarkupDialect.MARKDOWN_V2,
        truncated: bool = False,
    ) -> RenderedMessage:
        """Render the message; unknown dialects fall back to MarkdownV2."""
        resolved = MarkupDialect.parse(dialect)
        subject_text = subject.strip() or NO_SUBJECT_PLACEHOLDER
        body_lines = prepare_body(body).splitlines()
        if truncated:
            body_lines.append(TRUNCATION_MARKER)

        if resolved is MarkupDialect.HTML:
            text = _render_html(
                subject_text, sender.strip(), recipient.strip(), body_lines
            )
        else:
            text = _render_markdown(
                subject_text, sender.strip(), recipient.strip(), body_lines
            )
        LOGGER.debug("Rendered %d characters as %s", len(text), resolved.value)
        return RenderedMessage(text=text, dialect=resolved)

    def render_fields(
        self,
        fields: ParsedFields,
        body: str,
        dialect: MarkupDialect | str | None = MarkupDialect.MARKDOWN_V2,
        *,
        truncated: bool = False,
    ) -> RenderedMessage:
        """Render a :class:`ParsedFields` instance captured by a session."""
        return self.render(
            subject=fields.subject,
            sender=fields.sender,
            recipient=fields.recipient,
            body=body,
            dialect=dialect,
            truncated=truncated,
        )


def _render_markdown(
    subject: str, sender: str, recipient: str, body_lines: list[str]
) -> str:
    lines = [
        f"{_MESSAGE_ICON} *{escape_markdown(subject)}*",
        f"_From:_ {escape_markdown(sender)}",
        f"_To:_ {escape_markdown(recipient)}",
    ]
    lines.extend(_expandable_quote(body_lines))
    return "\n".join(lines)


def _expandable_quote(body_lines: list[str]) -> list[str]:
    if not body_lines:
        return []
    quoted = [f">{escape_markdown(line)}" for line in body_lines]
    quoted[0] = "**" + quoted[0]
    quoted[-1] += "||"
    return quoted


def _render_html(
    subject: str, sender: str, recipient: str, body_lines: list[str]
) -> str:
    lines = [
        f"{_MESSAGE_ICON} <b>{escape_html(subject)}</b>",
        f"<i>From:</i> <code>{escape_html(sender)}</code>",
        f"<i>To:</i> <code>{escape_html(recipient)}</code>",
    ]
    if body_lines:
        body = "\n".join(escape_html(line) for line in body_lines)
        lines.append(f"<blockquote expandable>{body}</blockquote>")
    return "\n".join(lines)


__all__ = [
    "MARKDOWN_SPECIAL_CHARS",
    "MessageRenderer",
    "NO_SUBJECT_PLACEHOLDER",
    "TRUNCATION_MARKER",
    "escape_html",
    "escape_markdown",
    "prepare_body",
    "unescape_markdown",
]
