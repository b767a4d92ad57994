"""Protocol interfaces for the collaborators surrounding the renderers."""

from __future__ import annotations

from typing import Protocol

from .models import AttachmentRef, MailItem


class FatalExportError(RuntimeError):
    """Raised when rendering cannot continue at all; aborts the whole run."""


class MissingAttachmentData(LookupError):
    """Raised when attachment bytes cannot be resolved from their fetch id."""


class UnparseableEmbeddedItem(ValueError):
    """Raised when an embedded message attachment cannot be parsed."""


class AttachmentSource(Protocol):
    """Lazy access to attachment payloads stored outside the item record."""

    def fetch(self, fetch_id: int) -> bytes:
        """Return the bytes stored under ``fetch_id``."""
        raise NotImplementedError


class ItemLoader(Protocol):
    """Re-entry point into item parsing for embedded messages."""

    def load_embedded(self, attachment: AttachmentRef) -> MailItem:
        """Parse the item carried by an embedded attachment."""
        raise NotImplementedError


class RtfDecompressor(Protocol):
    """Turns a compressed RTF body into plain RTF bytes."""

    def __call__(self, data: bytes) -> bytes:
        """Return the decompressed payload."""
        raise NotImplementedError


class DocumentSink(Protocol):
    """Destination for finished documents."""

    def write(self, name: str, document: bytes) -> None:
        """Store ``document`` under the relative ``name``."""
        raise NotImplementedError


__all__ = [
    "AttachmentSource",
    "DocumentSink",
    "FatalExportError",
    "ItemLoader",
    "MissingAttachmentData",
    "RtfDecompressor",
    "UnparseableEmbeddedItem",
]
