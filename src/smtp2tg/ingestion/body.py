"""Bounded accumulator for the message body snippet."""

from __future__ import annotations


class BodyAccumulator:
    """Collect body lines, keeping at most ``max_chars`` characters."""

    def __init__(self, max_chars: int) -> None:
        """Create an empty accumulator capped at ``max_chars``."""
        if max_chars < 1:
            raise ValueError("max_chars must be positive")
        self._max_chars = max_chars
        self._chunks: list[str] = []
        self._length = 0
        self.truncated = False

    @property
    def max_chars(self) -> int:
        """Configured character cap."""
        return self._max_chars

    @property
    def text(self) -> str:
        """Return the captured body text."""
        return "".join(self._chunks)

    def append(self, line: str) -> None:
        """Add ``line`` plus a newline, discarding whatever exceeds the cap."""
        if self.truncated:
            return
        chunk = line + "\n"
        remaining = self._max_chars - self._length
        if len(chunk) > remaining:
            chunk = chunk[:remaining]
            self.truncated = True
        if chunk:
            self._chunks.append(chunk)
            self._length += len(chunk)


__all__ = ["BodyAccumulator"]
