"""Tests for header, filename and directory text encoding helpers."""

from __future__ import annotations

from mailrender.core.encoding import (
    charset_for_codepage,
    default_charset,
    encode_header_value,
    escape_directory_text,
    format_sender,
    keyword_categories,
)
from mailrender.core.models import ExtraField, ItemType, MailItem


def test_charset_for_codepage() -> None:
    assert charset_for_codepage(65001) == "utf-8"
    assert charset_for_codepage(20866) == "koi8-r"
    assert charset_for_codepage(1252) == "windows-1252"


def test_default_charset_priority() -> None:
    item = MailItem(item_type=ItemType.NOTE, message_codepage=1251, internet_cpid=65001)

    assert default_charset(item, "iso-8859-1") == "windows-1251"
    item.body_charset = "big5"
    assert default_charset(item, "iso-8859-1") == "big5"
    bare = MailItem(item_type=ItemType.NOTE)
    assert default_charset(bare, "iso-8859-1") == "iso-8859-1"


def test_encode_header_value() -> None:
    assert encode_header_value("plain subject") == "plain subject"
    assert encode_header_value("Grüße").startswith("=?utf-8?")


def test_format_sender() -> None:
    assert format_sender(None, "a@example.com") == "<a@example.com>"
    assert format_sender("Smith, John", "j@example.com") == '"Smith, John" <j@example.com>'


def test_escape_directory_text() -> None:
    assert escape_directory_text("a;b,c\\d\r\ne") == "a\\;b\\,c\\\\d\\ne"


def test_keyword_categories() -> None:
    item = MailItem(item_type=ItemType.NOTE)
    assert keyword_categories(item) is None

    item.extra_fields.append(ExtraField(name="Keywords", value="work"))
    assert keyword_categories(item) == "CATEGORIES:work"
