"""Forward-only output stream shared by every renderer."""

from __future__ import annotations

import io
from typing import BinaryIO


class DocumentWriter:
    """Append-only writer over a binary file object.

    Text is encoded as UTF-8; raw bytes (bodies in their original charset)
    pass through unchanged. Nothing written is ever revisited.
    """

    def __init__(self, stream: BinaryIO | None = None) -> None:
        """Wrap ``stream``, defaulting to an in-memory buffer."""
        self._stream: BinaryIO = stream if stream is not None else io.BytesIO()
        self._written = 0

    @property
    def written(self) -> int:
        """Number of bytes written so far."""
        return self._written

    def write(self, text: str) -> None:
        """Write ``text`` encoded as UTF-8."""
        self.write_bytes(text.encode("utf-8", errors="surrogateescape"))

    def write_bytes(self, data: bytes) -> None:
        """Write ``data`` verbatim."""
        self._stream.write(data)
        self._written += len(data)

    def line(self, text: str = "") -> None:
        """Write ``text`` followed by a newline."""
        self.write(text + "\n")

    def getvalue(self) -> bytes:
        """Return everything written when backed by an in-memory buffer."""
        if not isinstance(self._stream, io.BytesIO):
            raise TypeError("DocumentWriter is not backed by an in-memory buffer")
        return self._stream.getvalue()


__all__ = ["DocumentWriter"]
