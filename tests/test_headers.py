"""Tests for header block validation, parsing and repair."""

from __future__ import annotations

import pytest

from mailrender.core.models import HeaderContext
from mailrender.rendering.headers import (
    HeaderAnalyzer,
    derive_sender,
    field_end,
    find_field,
    get_subfield,
    recover_nested_headers,
    strip_field,
    validate_headers,
)

SAMPLE_HEADERS = (
    "Received: from mx.example.com by mail.example.com\n"
    "From: Alice Example <alice@example.com>\n"
    "To: bob@example.com\n"
    "Subject: Quarterly numbers\n"
    "MIME-Version: 1.0\n"
    'Content-Type: multipart/alternative; charset="koi8-r";\n'
    '\tboundary="inner"\n'
    "X-MimeOLE: Produced By Microsoft MimeOLE\n"
    "\n"
)


@pytest.mark.parametrize(
    "blob",
    [
        "Received: from a by b\n",
        "received: lower case tag\n",
        "Microsoft Mail Internet Headers Version 2.0\n",
        "Subject:\r\n\tfolded on the first line\n",
        "X-Barracuda-URL: http://example.com\n",
    ],
)
def test_validate_accepts_known_leading_tags(blob: str) -> None:
    assert validate_headers(blob)


@pytest.mark.parametrize(
    "blob",
    [None, "", "Hello Bob, see you tomorrow", "Subject:no-space\n", "X-Other: 1\n"],
)
def test_validate_rejects_unknown_blobs(blob: str | None) -> None:
    assert not validate_headers(blob)


def test_find_field_is_case_insensitive_and_line_anchored() -> None:
    headers = "Received: x\nX-Original-To: carol@example.com\nto: bob@example.com\n"

    position = find_field(headers, "To:")

    assert position is not None
    assert headers[position:].startswith("to: bob")


def test_find_field_matches_at_block_start() -> None:
    assert find_field("From: a@example.com\n", "From:") == 0
    assert find_field("Received: x\n", "From:") is None


def test_field_end_skips_continuation_lines() -> None:
    headers = "A: 1\nContent-Type: text/plain;\n\tcharset=utf-8\n  format=flowed\nB: 2\n"
    position = find_field(headers, "Content-Type:")
    assert position is not None

    end = field_end(headers, position)

    assert end is not None
    assert headers[end + 1 :].startswith("B: 2")


def test_field_end_returns_none_for_last_unterminated_field() -> None:
    headers = "A: 1\nB: 2"
    position = find_field(headers, "B:")
    assert position is not None
    assert field_end(headers, position) is None


def test_get_subfield_quoted_and_unquoted_values() -> None:
    headers = (
        "Content-Type: multipart/report; report-type=delivery-status;\n"
        '\tboundary="abc"; charset="utf-8"\n'
        "X-Next: value\n"
    )
    position = find_field(headers, "Content-Type:")

    assert get_subfield(headers, position, "report-type") == "delivery-status"
    assert get_subfield(headers, position, "charset") == "utf-8"
    assert get_subfield(headers, position, "format") is None
    assert get_subfield(headers, None, "charset") is None


def test_get_subfield_stops_at_field_end() -> None:
    headers = "Content-Type: text/plain\nX-Other: x; charset=latin1\n"
    position = find_field(headers, "Content-Type:")

    assert get_subfield(headers, position, "charset") is None


def test_strip_field_absent_is_noop() -> None:
    headers = "From: a@example.com\nTo: b@example.com\n"

    assert strip_field(headers, "Content-Type:") == headers


def test_strip_field_removes_folded_field_and_keeps_single_blank_line() -> None:
    message = (
        "From: a@example.com\n"
        "Content-Type: multipart/mixed;\n"
        '\tboundary="xyz";\n'
        "\tcharset=utf-8\n"
        "Subject: hi\n"
        "\n"
        "body text\n"
    )

    stripped = strip_field(message, "Content-Type:")

    assert stripped == "From: a@example.com\nSubject: hi\n\nbody text\n"
    assert "boundary" not in stripped


def test_strip_field_removes_every_occurrence_including_first_line() -> None:
    headers = "X-MimeOLE: a\nFrom: x@example.com\nX-MimeOLE: b\n\tcontinued\n"

    assert strip_field(headers, "X-MimeOLE:") == "From: x@example.com\n"


def test_strip_field_truncates_unterminated_last_field() -> None:
    assert strip_field("From: x\nX-From_: y", "X-From_:") == "From: x"


def test_derive_sender_prefers_existing_address() -> None:
    assert derive_sender("From: A <a@example.com>\n", "z@example.com") == "z@example.com"


def test_derive_sender_reads_angle_address_from_first_line() -> None:
    headers = "Received: x\nFrom: Alice <alice@example.com>\nTo: bob@example.com\n"

    assert derive_sender(headers, "/O=EXCHANGE/CN=ALICE") == "alice@example.com"


def test_derive_sender_falls_back_to_mailer_daemon() -> None:
    assert derive_sender("From: alice@example.com\n", None) == "MAILER-DAEMON"
    assert derive_sender("From: Alice\n <alice@example.com>\n", None) == "MAILER-DAEMON"
    assert derive_sender(None, None) == "MAILER-DAEMON"


def test_recover_nested_headers_moves_to_group_after_rfc822_part() -> None:
    context = HeaderContext(
        remainder=(
            "Content-Type: text/plain; charset=us-ascii\n"
            "\n"
            "Content-Type: message/rfc822\n"
            "\n"
            "From: inner@example.com\n"
            "Subject: Inner\n"
            "\n"
            "inner body\n"
        )
    )

    recover_nested_headers(context)

    assert context.remainder is not None
    assert context.remainder.startswith("From: inner@example.com\nSubject: Inner\n")


def test_recover_nested_headers_without_rfc822_group_keeps_last_group() -> None:
    context = HeaderContext(remainder="Content-Type: text/plain\n\nContent-Type: image/png\n")

    recover_nested_headers(context)

    assert context.remainder == "Content-Type: image/png\n"


def test_analyzer_extracts_flags_charset_and_strips_mime_fields() -> None:
    context = HeaderContext()

    block = HeaderAnalyzer().resolve(
        SAMPLE_HEADERS.replace("\n", "\r\n") + "Content-Type: text/plain\n\nbody",
        context,
        sender_address=None,
    )

    assert block.has_from and block.has_to and block.has_subject
    assert not block.has_cc and not block.has_date and not block.has_msgid
    assert block.charset == "koi8-r"
    assert block.report_type == "delivery-status"
    assert block.sender == "alice@example.com"
    assert "\r" not in block.text
    assert "Content-Type" not in block.text
    assert "MIME-Version" not in block.text
    assert "X-MimeOLE" not in block.text
    assert block.text.endswith("Subject: Quarterly numbers\n")
    assert context.remainder == "Content-Type: text/plain\n\nbody"


def test_analyzer_keeps_existing_context() -> None:
    context = HeaderContext(remainder="Received: carried\n")

    HeaderAnalyzer().resolve(SAMPLE_HEADERS + "rest", context)

    assert context.remainder == "Received: carried\n"


def test_analyzer_falls_back_to_context_blob() -> None:
    context = HeaderContext(remainder="From: ctx@example.com\nSubject: From context\n")

    block = HeaderAnalyzer().resolve("garbage that is not a header", context)

    assert block.has_from and block.has_subject
    assert block.sender == "MAILER-DAEMON"
    assert block.text.startswith("From: ctx@example.com")


def test_analyzer_without_valid_blob_synthesizes_everything() -> None:
    block = HeaderAnalyzer().resolve(
        "not a header", HeaderContext(), sender_address="me@example.com"
    )

    assert block.text == ""
    assert not block.has_from
    assert block.sender == "me@example.com"
    assert block.charset is None


def test_analyzer_skips_missing_own_header_and_uses_context() -> None:
    context = HeaderContext(remainder="Subject: Carried\n")

    block = HeaderAnalyzer().resolve(None, context)

    assert block.has_subject
    assert block.text == "Subject: Carried\n"
    assert HeaderAnalyzer().resolve(None, HeaderContext()).text == ""
