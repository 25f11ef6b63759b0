"""Classify raw header lines from the DATA section into tracked fields."""

from __future__ import annotations

from ..core.models import HeaderStatus, ParsedFields

# Header name (lowercase, with colon) -> ParsedFields attribute.
_TRACKED_HEADERS: tuple[tuple[str, str], ...] = (
    ("from:", "sender"),
    ("to:", "recipient"),
    ("subject:", "subject"),
)
_FOLDING_WHITESPACE = (" ", "\t")


class HeaderExtractor:
    """Fill :class:`ParsedFields` one header line at a time.

    The extractor is stateless; all progress lives in the ``ParsedFields``
    instance owned by the session, so one extractor can be shared.
    """

    def feed(self, line: str, fields: ParsedFields) -> HeaderStatus:
        """Consume ``line`` and report whether the header block is finished.

        A blank line is the header/body separator: it yields
        :attr:`HeaderStatus.INVALID` unless every field was already found.
        The first occurrence of a header wins; later duplicates are ignored.
        Folded continuation lines (leading space or tab) never start a header.
        """
        stripped = line.strip()
        if not stripped:
            return _progress(fields, pending=HeaderStatus.INVALID)
        if line[:1] in _FOLDING_WHITESPACE:
            return _progress(fields)

        match = _match_header(stripped)
        if match is not None:
            attribute, value = match
            if not getattr(fields, attribute):
                setattr(fields, attribute, value)

        return _progress(fields)


def _progress(
    fields: ParsedFields, pending: HeaderStatus = HeaderStatus.INCOMPLETE
) -> HeaderStatus:
    return HeaderStatus.COMPLETE if fields.is_complete else pending


def _match_header(line: str) -> tuple[str, str] | None:
    lowered = line.lower()
    for prefix, attribute in _TRACKED_HEADERS:
        if lowered.startswith(prefix):
            return attribute, line[len(prefix) :].strip()
    return None


__all__ = ["HeaderExtractor"]
