"""Tests for the bounded body accumulator."""

from __future__ import annotations

import pytest

from smtp2tg.ingestion import BodyAccumulator


def test_lines_are_joined_with_newlines() -> None:
    body = BodyAccumulator(max_chars=100)

    body.append("hello")
    body.append("")
    body.append("world")

    assert body.text == "hello\n\nworld\n"
    assert body.truncated is False


def test_body_longer_than_cap_is_cut_to_exact_length() -> None:
    body = BodyAccumulator(max_chars=10)

    for _ in range(5):
        body.append("abcdef")

    assert body.text == "abcdef\nabc"
    assert len(body.text) == 10
    assert body.truncated is True


def test_body_exactly_at_cap_is_not_truncated() -> None:
    body = BodyAccumulator(max_chars=6)

    body.append("abcde")

    assert body.text == "abcde\n"
    assert body.truncated is False


def test_non_positive_cap_is_rejected() -> None:
    with pytest.raises(ValueError):
        BodyAccumulator(max_chars=0)
