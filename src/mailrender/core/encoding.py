"""Text encoding helpers for header values, filenames and directory text."""

from __future__ import annotations

import base64
from email.header import Header
from email.utils import encode_rfc2231, formataddr

from .models import MailItem

_CODEPAGE_CHARSETS = {
    932: "iso-2022-jp",
    936: "gb2312",
    950: "big5",
    1200: "ucs-2le",
    1201: "ucs-2be",
    20127: "us-ascii",
    20269: "iso-6937",
    20865: "iso-8859-15",
    20866: "koi8-r",
    21866: "koi8-u",
    28591: "iso-8859-1",
    28592: "iso-8859-2",
    28595: "iso-8859-5",
    28596: "iso-8859-6",
    28597: "iso-8859-7",
    28598: "iso-8859-8",
    28599: "iso-8859-9",
    28600: "iso-8859-10",
    28601: "iso-8859-11",
    28602: "iso-8859-12",
    28603: "iso-8859-13",
    28604: "iso-8859-14",
    28605: "iso-8859-15",
    50220: "iso-2022-jp",
    50221: "csiso2022jp",
    51932: "euc-jp",
    51949: "euc-kr",
    65000: "utf-7",
    65001: "utf-8",
}


def charset_for_codepage(codepage: int) -> str:
    """Map a Windows code page number to a MIME charset name."""
    return _CODEPAGE_CHARSETS.get(codepage, f"windows-{codepage}")


def default_charset(item: MailItem, fallback: str) -> str:
    """Return the charset an item's bodies are assumed to use."""
    if item.body_charset:
        return item.body_charset
    if item.message_codepage:
        return charset_for_codepage(item.message_codepage)
    if item.internet_cpid:
        return charset_for_codepage(item.internet_cpid)
    return fallback


def encode_header_value(value: str) -> str:
    """RFC2047-encode ``value`` when it is not plain ASCII."""
    if value.isascii():
        return value
    return Header(value, charset="utf-8").encode()


def format_sender(name: str | None, address: str) -> str:
    """Build a ``From`` header value from an optional display name."""
    if not name:
        return f"<{address}>"
    return formataddr((name, address))


def encode_filename(value: str) -> str:
    """Return ``value`` as an RFC2231 extended parameter value."""
    return encode_rfc2231(value, "utf-8")


def quote_string(value: str) -> str:
    """Backslash-escape double quotes and backslashes."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def escape_directory_text(value: str) -> str:
    """Escape a vCard/iCalendar text value (RFC2426 section 4)."""
    escaped: list[str] = []
    for char in value:
        if char == "\r":
            continue
        if char == "\n":
            escaped.append("\\n")
        elif char in "\\;,":
            escaped.append("\\" + char)
        else:
            escaped.append(char)
    return "".join(escaped)


def keyword_categories(item: MailItem) -> str | None:
    """Return a ``CATEGORIES`` line built from the item's Keywords, if any."""
    keywords = item.keywords()
    if not keywords:
        return None
    return "CATEGORIES:" + ", ".join(escape_directory_text(value) for value in keywords)


def base64_lines(data: bytes) -> bytes:
    """Base64-encode ``data`` into 76 column lines without a trailing newline."""
    return base64.encodebytes(data).rstrip(b"\n")


__all__ = [
    "base64_lines",
    "charset_for_codepage",
    "default_charset",
    "encode_filename",
    "encode_header_value",
    "escape_directory_text",
    "format_sender",
    "keyword_categories",
    "quote_string",
]
