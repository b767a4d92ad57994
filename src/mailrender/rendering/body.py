"""Encoding of a single plain or HTML body part."""

from __future__ import annotations

import logging

from ..core.encoding import base64_lines
from ..core.models import BodyText
from ..core.stream import DocumentWriter

LOGGER = logging.getLogger(__name__)

_TAB = 0x09
_NEWLINE = 0x0A


def remove_carriage_returns(data: bytes) -> bytes:
    """Drop every CR byte, turning CRLF line endings into LF."""
    return data.replace(b"\r", b"")


def needs_base64(data: bytes) -> bool:
    """Return ``True`` when ``data`` holds control bytes other than TAB and LF.

    Bodies in encodings with NUL bytes, e.g. UTF-16, are caught here.
    """
    return any(byte < 0x20 and byte not in (_TAB, _NEWLINE) for byte in data)


class BodyPartEncoder:
    """Write text bodies as MIME parts."""

    def write(
        self,
        writer: DocumentWriter,
        body: BodyText,
        *,
        mimetype: str,
        charset: str,
        boundary: str,
    ) -> None:
        """Emit ``body`` as one part delimited by ``boundary``."""
        data = remove_carriage_returns(body.data)
        if body.is_utf8:
            charset = "utf-8"
        encode = needs_base64(data)
        LOGGER.debug(
            "Writing %s body part (%d bytes, charset %s, base64=%s)",
            mimetype,
            len(data),
            charset,
            encode,
        )

        writer.write(f"\n--{boundary}\n")
        writer.line(f'Content-Type: {mimetype}; charset="{charset}"')
        if encode:
            writer.line("Content-Transfer-Encoding: base64")
        writer.line()
        if encode:
            writer.write_bytes(base64_lines(data))
            writer.line()
        else:
            writer.write_bytes(data)


__all__ = ["BodyPartEncoder", "needs_base64", "remove_carriage_returns"]
