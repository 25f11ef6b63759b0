"""SMTP command state machine for a single client connection."""

from __future__ import annotations

import codecs
import logging
from collections.abc import Callable
from typing import BinaryIO, NamedTuple

from ..core.interfaces import Notifier
from ..core.models import (
    HeaderStatus,
    MarkupDialect,
    ParsedFields,
    RenderedMessage,
    SessionPhase,
)
from ..ingestion import BodyAccumulator, HeaderExtractor
from ..rendering import NO_SUBJECT_PLACEHOLDER, MessageRenderer

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "smtp2tg"
MAX_LINE_BYTES = 8192
END_OF_DATA = "."

_ACCEPTS_RECIPIENT = frozenset({SessionPhase.HAS_SENDER, SessionPhase.HAS_RECIPIENT})


class _Line(NamedTuple):
    text: str
    oversized: bool


class SmtpSession:
    """Drive one SMTP conversation over a pair of binary streams.

    Commands are handled strictly in arrival order, each one answered before
    the next line is read. Socket errors are not caught here; they propagate
    to the caller, which owns the connection.
    """

    def __init__(
        self,
        reader: BinaryIO,
        writer: BinaryIO,
        *,
        renderer: MessageRenderer,
        notifier: Notifier,
        dialect: MarkupDialect = MarkupDialect.MARKDOWN_V2,
        max_body_chars: int = 3000,
        peer: str = "-",
    ) -> None:
        """Bind the session to its streams and shared collaborators."""
        self._reader = reader
        self._writer = writer
        self._renderer = renderer
        self._notifier = notifier
        self._dialect = dialect
        self._max_body_chars = max_body_chars
        self._peer = peer
        self._extractor = HeaderExtractor()
        self._handlers: tuple[tuple[str, Callable[[str], None]], ...] = (
            ("EHLO", self._handle_ehlo),
            ("HELO", self._handle_helo),
            ("MAIL FROM:", self._handle_mail),
            ("RCPT TO:", self._handle_rcpt),
            ("DATA", self._handle_data),
            ("RSET", self._handle_rset),
            ("NOOP", self._handle_noop),
            ("QUIT", self._handle_quit),
        )
        self.phase = SessionPhase.INIT
        self.fields = ParsedFields()
        self.last_message: RenderedMessage | None = None
        self.messages_accepted = 0

    def run(self) -> None:
        """Greet the client and process commands until QUIT or disconnect."""
        self._reply(f"220 {SERVER_NAME} ready")
        self.phase = SessionPhase.GREETED
        while self.phase is not SessionPhase.CLOSED:
            line = self._read_line()
            if line is None:
                LOGGER.debug("Client %s disconnected", self._peer)
                self.phase = SessionPhase.CLOSED
                break
            if line.oversized:
                LOGGER.warning("Oversized command line from %s discarded", self._peer)
                self._reply("500 Line too long")
                continue
            self.handle_command(line.text)

    def handle_command(self, line: str) -> None:
        """Dispatch one command line using case-insensitive prefix matching."""
        LOGGER.debug("SMTP command from %s: %s", self._peer, line)
        upper = line.upper()
        for prefix, handler in self._handlers:
            if upper.startswith(prefix):
                handler(line[len(prefix) :].strip())
                return
        self._reply("502 Command not supported")

    # Command handlers ---------------------------------------------------------
    def _handle_ehlo(self, argument: str) -> None:
        client = argument or "client"
        self._reply(f"250-{SERVER_NAME} greets {client}", "250 HELP")

    def _handle_helo(self, _argument: str) -> None:
        self._reply(f"250 {SERVER_NAME}")

    def _handle_mail(self, _argument: str) -> None:
        self.phase = SessionPhase.HAS_SENDER
        self._reply("250 OK")

    def _handle_rcpt(self, _argument: str) -> None:
        if self.phase not in _ACCEPTS_RECIPIENT:
            self._reply("503 MAIL first")
            return
        self.phase = SessionPhase.HAS_RECIPIENT
        self._reply("250 OK")

    def _handle_data(self, _argument: str) -> None:
        if self.phase is not SessionPhase.HAS_RECIPIENT:
            self._reply("503 Need MAIL and RCPT")
            return
        self.phase = SessionPhase.RECEIVING_DATA
        self._reply("354 End with <CR><LF>.<CR><LF>")
        self._receive_data()

    def _handle_rset(self, _argument: str) -> None:
        self.phase = SessionPhase.GREETED
        self._reply("250 OK")

    def _handle_noop(self, _argument: str) -> None:
        self._reply("250 OK")

    def _handle_quit(self, _argument: str) -> None:
        self._reply("221 Bye")
        self.phase = SessionPhase.CLOSED

    # DATA phase ---------------------------------------------------------------
    def _receive_data(self) -> None:
        fields = ParsedFields()
        body = BodyAccumulator(self._max_body_chars)
        in_headers = True
        header_status = HeaderStatus.INCOMPLETE
        ended_cleanly = False

        while True:
            next_line = self._read_line()
            if next_line is None:
                break
            line = next_line.text
            if next_line.oversized:
                LOGGER.debug(
                    "Data line from %s cut to %d bytes", self._peer, MAX_LINE_BYTES
                )
            elif line == END_OF_DATA:
                ended_cleanly = True
                break
            if line.startswith(".."):
                line = line[1:]
            if in_headers:
                if not line.strip():
                    in_headers = False
                    continue
                if header_status is HeaderStatus.INCOMPLETE:
                    header_status = self._extractor.feed(line, fields)
            else:
                body.append(line)

        if not ended_cleanly:
            LOGGER.warning(
                "Client %s closed the stream during DATA; forwarding partial message",
                self._peer,
            )

        self.fields = fields
        self.phase = SessionPhase.DONE
        self._forward(fields, body)
        self._reply("250 Message accepted")

    def _forward(self, fields: ParsedFields, body: BodyAccumulator) -> None:
        LOGGER.debug("Subject: %s", fields.subject or NO_SUBJECT_PLACEHOLDER)
        LOGGER.debug("Body preview:\n%s", body.text.strip())
        if body.truncated:
            LOGGER.info(
                "Body from %s truncated to %d characters", self._peer, body.max_chars
            )

        message = self._renderer.render_fields(
            fields, body.text, self._dialect, truncated=body.truncated
        )
        self.last_message = message
        self.messages_accepted += 1
        if not self._notifier.send(message):
            LOGGER.warning(
                "Message from %s accepted but notification failed", self._peer
            )

    # Stream helpers -----------------------------------------------------------
    def _read_line(self) -> _Line | None:
        """Read one complete line; anything past ``MAX_LINE_BYTES`` is dropped."""
        raw = self._reader.readline(MAX_LINE_BYTES)
        if not raw:
            return None
        if raw.endswith(b"\n") or len(raw) < MAX_LINE_BYTES:
            return _Line(raw.decode("utf-8", errors="replace").rstrip("\r\n"), False)

        while True:
            overflow = self._reader.readline(MAX_LINE_BYTES)
            if not overflow or overflow.endswith(b"\n"):
                break
        # The cut may fall inside a multi-byte character; drop the partial tail.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        return _Line(decoder.decode(raw, final=False).rstrip("\r"), True)

    def _reply(self, *lines: str) -> None:
        payload = "".join(f"{line}\r\n" for line in lines)
        self._writer.write(payload.encode("utf-8"))
        self._writer.flush()


__all__ = ["SmtpSession", "SERVER_NAME"]
