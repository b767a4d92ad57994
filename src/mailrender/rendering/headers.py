"""Recovery and repair of the original RFC822 header block of a message.

Header blobs stored alongside items are frequently unreliable: some are
fragments of the message body, some are truncated, some carry the MIME
headers of every part of the original message after the top-level block.
The helpers here decide whether a blob can be reused, extract the few facts
the assembler needs from it, and strip the fields the assembler writes
itself.

All edits return a new string; no scan ever runs over a buffer that is
being modified.
"""

from __future__ import annotations

import logging
import re

from ..core.models import HeaderBlock, HeaderContext

LOGGER = logging.getLogger(__name__)

RFC822_MIMETYPE = "message/rfc822"
DEFAULT_SENDER = "MAILER-DAEMON"

# Leading tags seen in real header blobs; anything else is treated as bogus.
_VALID_HEADER_TAGS = (
    "Content-Type: ",
    "Date: ",
    "From: ",
    "MIME-Version: ",
    "Microsoft Mail Internet Headers",
    "Received: ",
    "Return-Path: ",
    "Subject: ",
    "To: ",
    "X-ASG-Debug-ID: ",
    "X-Barracuda-URL: ",
    "X-x: ",
)

_FOLD_SEQUENCE = "\r\n\t"

# Fields the assembler emits itself or that describe the original MIME layout.
_STRIPPED_FIELDS = (
    "Microsoft Mail Internet Headers",
    "MIME-Version:",
    "Content-Type:",
    "Content-Transfer-Encoding:",
    "Content-class:",
    "X-MimeOLE:",
    "X-From_:",
)


def _matches_tag(header: str, tag: str) -> bool:
    size = len(tag)
    if header[:size].lower() == tag.lower():
        return True
    if tag.endswith(" ") and header[: size - 1].lower() == tag[:-1].lower():
        return header[size - 1 : size + 2] == _FOLD_SEQUENCE
    return False


def validate_headers(header: str | None) -> bool:
    """Return ``True`` when ``header`` starts like a genuine header block."""
    if not header:
        return False
    if any(_matches_tag(header, tag) for tag in _VALID_HEADER_TAGS):
        return True
    if len(header) > 2:
        LOGGER.debug("Ignoring bogus header block starting %r", header[:40])
    return False


def find_field(header: str, name: str) -> int | None:
    """Return the offset of field ``name`` in ``header`` or ``None``.

    Fields are only recognised at the start of a line; the block may begin
    directly with the field.
    """
    match = re.search("\n" + re.escape(name), header, re.IGNORECASE)
    if match is not None:
        return match.start() + 1
    if header[: len(name)].lower() == name.lower():
        return 0
    return None


def field_end(header: str, position: int) -> int | None:
    """Return the offset of the newline ending the field at ``position``.

    Continuation lines starting with a space or tab belong to the field.
    ``None`` means the field runs to the end of the block.
    """
    end = header.find("\n", position)
    while end != -1 and header[end + 1 : end + 2] in (" ", "\t"):
        end = header.find("\n", end + 1)
    return None if end == -1 else end


def get_subfield(header: str, position: int | None, key: str) -> str | None:
    """Return parameter ``key`` of the field at ``position``, if present."""
    if position is None:
        return None
    end = field_end(header, position)
    if end is None:
        end = len(header)
    match = re.compile(re.escape(f" {key}="), re.IGNORECASE).search(
        header, position, end
    )
    if match is None:
        return None
    start = match.end()
    if header[start : start + 1] == '"':
        start += 1
        stop = header.find('"', start)
    else:
        stop = header.find(";", start)
        newline = header.find("\n", start)
        if stop == -1 or (newline != -1 and newline < stop):
            stop = newline
    if stop == -1 or stop > end:
        stop = end
    return header[start:stop]


def strip_field(header: str, name: str) -> str:
    """Remove every occurrence of field ``name`` including its continuations."""
    while (position := find_field(header, name)) is not None:
        end = field_end(header, position)
        if end is None:
            # Last field of the block: drop it along with the newline before it.
            header = header[: max(position - 1, 0)]
        elif position == 0:
            header = header[end + 1 :]
        else:
            header = header[: position - 1] + header[end:]
    return header


def _content_type_value(group: str) -> str | None:
    position = find_field(group, "Content-Type:")
    if position is None:
        return None
    line_end = group.find("\n", position)
    if line_end == -1:
        line_end = len(group)
    separator = group.find(": ", position, line_end)
    if separator == -1:
        return None
    value_end = group.find(";", separator, line_end)
    if value_end == -1:
        value_end = line_end
    return group[separator + 2 : value_end].strip()


def recover_nested_headers(context: HeaderContext) -> None:
    """Advance ``context`` to the header group of the next embedded message.

    Groups are scanned in order; when one declares ``message/rfc822`` the
    group after it holds the real headers of the embedded message. When no
    such group exists the context is left at its last group.
    """
    headers = context.remainder
    if headers is None:
        return
    while (gap := headers.find("\n\n")) != -1:
        group = headers[: gap + 1]
        headers = headers[gap + 2 :]
        content_type = _content_type_value(group)
        if content_type is not None and content_type.lower() == RFC822_MIMETYPE:
            LOGGER.debug("Found embedded message headers in carried context")
            break
    context.remainder = headers


def derive_sender(header: str | None, existing_address: str | None) -> str:
    """Pick the envelope sender address for a message."""
    if existing_address and "@" in existing_address:
        return existing_address
    if header:
        position = find_field(header, "From:")
        if position is not None:
            line_end = header.find("\n", position)
            opening = header.find("<", position)
            closing = header.find(">", position)
            if line_end != -1 and -1 < opening < closing < line_end:
                return header[opening + 1 : closing]
    return DEFAULT_SENDER


def _first_valid_header(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate is not None and validate_headers(candidate):
            return candidate
    return None


class HeaderAnalyzer:
    """Resolve the header block a message will be written with."""

    def resolve(
        self,
        own_header: str | None,
        context: HeaderContext,
        *,
        sender_address: str | None = None,
    ) -> HeaderBlock:
        """Analyse the best available header blob.

        The item's own blob wins when it validates; otherwise the carried
        context is tried. The first blank line ends the block proper and what
        follows seeds an empty context for embedded messages.
        """
        raw = _first_valid_header(own_header, context.remainder)
        if raw is None:
            LOGGER.debug("No usable header block; all headers will be synthesized")
            return HeaderBlock(sender=derive_sender(None, sender_address))

        text = raw.replace("\r", "")
        gap = text.find("\n\n")
        if gap != -1:
            if context.remainder is None:
                context.remainder = text[gap + 2 :]
            text = text[: gap + 1]

        block = HeaderBlock(
            has_from=find_field(text, "From:") is not None,
            has_to=find_field(text, "To:") is not None,
            has_subject=find_field(text, "Subject:") is not None,
            has_cc=find_field(text, "CC:") is not None,
            has_date=find_field(text, "Date:") is not None,
            has_msgid=find_field(text, "Message-Id:") is not None,
            sender=derive_sender(text, sender_address),
        )
        content_type = find_field(text, "Content-Type:")
        block.charset = get_subfield(text, content_type, "charset")
        report_type = get_subfield(text, content_type, "report-type")
        if report_type:
            block.report_type = report_type

        for name in _STRIPPED_FIELDS:
            text = strip_field(text, name)
        block.text = text
        return block


__all__ = [
    "DEFAULT_SENDER",
    "HeaderAnalyzer",
    "RFC822_MIMETYPE",
    "derive_sender",
    "field_end",
    "find_field",
    "get_subfield",
    "recover_nested_headers",
    "strip_field",
    "validate_headers",
]
