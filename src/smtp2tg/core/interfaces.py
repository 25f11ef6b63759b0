"""Protocol interfaces for decoupling components."""

from __future__ import annotations

from typing import Protocol

from .models import RenderedMessage


class Notifier(Protocol):
    """Destination that receives one rendered message per accepted email."""

    def send(self, message: RenderedMessage) -> bool:
        """Deliver ``message``; return ``True`` on success, ``False`` otherwise."""
        raise NotImplementedError


__all__ = ["Notifier"]
