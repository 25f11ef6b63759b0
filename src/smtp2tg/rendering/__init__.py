"""Chat markup rendering for forwarded emails."""

from .renderer import (
    NO_SUBJECT_PLACEHOLDER,
    MessageRenderer,
    escape_html,
    escape_markdown,
    prepare_body,
    unescape_markdown,
)

__all__ = [
    "MessageRenderer",
    "NO_SUBJECT_PLACEHOLDER",
    "escape_html",
    "escape_markdown",
    "prepare_body",
    "unescape_markdown",
]
