"""Tests for header line classification."""

from __future__ import annotations

from smtp2tg.core.models import HeaderStatus, ParsedFields
from smtp2tg.ingestion import HeaderExtractor


def test_all_three_headers_complete_the_block() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    assert extractor.feed("From: alice@example.com", fields) is HeaderStatus.INCOMPLETE
    assert extractor.feed("To: bob@example.com", fields) is HeaderStatus.INCOMPLETE
    assert extractor.feed("Subject: Hello there", fields) is HeaderStatus.COMPLETE
    assert fields == ParsedFields(
        sender="alice@example.com",
        recipient="bob@example.com",
        subject="Hello there",
    )


def test_matching_is_case_insensitive_and_trims_values() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    extractor.feed("to:bob@example.com  \r\n", fields)
    extractor.feed("SUBJECT:   Status  ", fields)
    extractor.feed("from: a", fields)

    assert fields.recipient == "bob@example.com"
    assert fields.subject == "Status"
    assert fields.sender == "a"


def test_first_subject_wins() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    extractor.feed("Subject: first", fields)
    extractor.feed("Subject: second", fields)

    assert fields.subject == "first"


def test_blank_line_before_all_fields_is_invalid() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    extractor.feed("Subject: only this", fields)

    assert extractor.feed("   ", fields) is HeaderStatus.INVALID
    assert fields.subject == "only this"
    assert fields.sender == ""


def test_unknown_headers_are_ignored() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    assert extractor.feed("Date: Mon, 1 Jan 2024", fields) is HeaderStatus.INCOMPLETE
    assert extractor.feed("Reply-To: x@example.com", fields) is HeaderStatus.INCOMPLETE
    assert extractor.feed("Tofu: not a recipient", fields) is HeaderStatus.INCOMPLETE
    assert fields == ParsedFields()


def test_empty_header_value_leaves_field_open() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    extractor.feed("Subject:", fields)
    extractor.feed("Subject: later", fields)

    assert fields.subject == "later"


def test_folded_continuation_never_starts_a_header() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields()

    extractor.feed("Subject: weekly report", fields)
    status = extractor.feed("\tTo: spoofed@example.com", fields)
    extractor.feed(" from: also-spoofed@example.com", fields)

    assert status is HeaderStatus.INCOMPLETE
    assert fields == ParsedFields(subject="weekly report")


def test_continuation_after_complete_block_stays_complete() -> None:
    extractor = HeaderExtractor()
    fields = ParsedFields(sender="a", recipient="b", subject="c")

    assert extractor.feed("  continued", fields) is HeaderStatus.COMPLETE
