"""Serialization of attachment parts, including embedded messages."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.encoding import base64_lines, encode_filename, quote_string
from ..core.interfaces import (
    AttachmentSource,
    ItemLoader,
    MissingAttachmentData,
    UnparseableEmbeddedItem,
)
from ..core.models import AttachMethod, AttachmentRef, HeaderContext, MailItem
from ..core.stream import DocumentWriter
from .headers import RFC822_MIMETYPE, recover_nested_headers

LOGGER = logging.getLogger(__name__)

DEFAULT_MIMETYPE = "application/octet-stream"

MessageWriter = Callable[[DocumentWriter, MailItem, HeaderContext], None]


class AttachmentEmitter:
    """Write the attachment list of one message."""

    def __init__(
        self,
        write_message: MessageWriter,
        *,
        source: AttachmentSource | None = None,
        loader: ItemLoader | None = None,
    ) -> None:
        """Wire the emitter to the collaborators it needs.

        ``write_message`` renders a complete nested message onto the same
        stream and is used for embedded attachments.
        """
        self._write_message = write_message
        self._source = source
        self._loader = loader

    def write(
        self,
        writer: DocumentWriter,
        attachment: AttachmentRef,
        *,
        boundary: str,
        context: HeaderContext,
    ) -> bool:
        """Emit ``attachment``; return ``False`` when it had to be skipped."""
        if attachment.method is AttachMethod.EMBEDDED:
            attachment.mimetype = RFC822_MIMETYPE
            recover_nested_headers(context)
            return self._write_embedded(writer, attachment, boundary, context)
        if attachment.data is not None or attachment.fetch_id is not None:
            return self._write_inline(writer, attachment, boundary)
        LOGGER.debug("Attachment without data or fetch id ignored")
        return False

    def _resolve_data(self, attachment: AttachmentRef) -> bytes:
        if attachment.data is not None:
            return attachment.data
        if self._source is None or attachment.fetch_id is None:
            raise MissingAttachmentData("no attachment source available")
        return self._source.fetch(attachment.fetch_id)

    def _write_inline(
        self, writer: DocumentWriter, attachment: AttachmentRef, boundary: str
    ) -> bool:
        try:
            data = self._resolve_data(attachment)
        except MissingAttachmentData as exc:
            LOGGER.warning(
                "Skipping attachment %s: cannot fetch id %s (%s)",
                attachment.long_filename or attachment.filename or "<unnamed>",
                attachment.fetch_id,
                exc,
            )
            return False

        writer.write(f"\n--{boundary}\n")
        writer.line(f"Content-Type: {attachment.mimetype or DEFAULT_MIMETYPE}")
        writer.line("Content-Transfer-Encoding: base64")
        if attachment.content_id:
            writer.line(f"Content-ID: <{attachment.content_id}>")

        if attachment.long_filename:
            # The UTF-8 plain ``filename`` is not strictly valid but is the
            # form Outlook reads.
            writer.line("Content-Disposition: attachment; ")
            writer.line(f"        filename*={encode_filename(attachment.long_filename)};")
            writer.line(f'        filename="{quote_string(attachment.long_filename)}"')
        elif attachment.filename:
            writer.line(
                f'Content-Disposition: attachment; filename="{attachment.filename}"'
            )
        else:
            writer.line("Content-Disposition: inline")
        writer.line()

        writer.write_bytes(base64_lines(data))
        writer.write("\n\n")
        return True

    def _write_embedded(
        self,
        writer: DocumentWriter,
        attachment: AttachmentRef,
        boundary: str,
        context: HeaderContext,
    ) -> bool:
        if self._loader is None:
            LOGGER.warning("Skipping embedded message: no item loader configured")
            return False
        try:
            item = self._loader.load_embedded(attachment)
        except UnparseableEmbeddedItem as exc:
            LOGGER.warning("Skipping embedded message that failed to parse: %s", exc)
            return False
        if item.email is None:
            LOGGER.warning(
                "Skipping embedded %s item: not an email message",
                item.item_type.value,
            )
            return False

        writer.write(f"\n--{boundary}\n")
        writer.line(f"Content-Type: {attachment.mimetype}")
        writer.line()
        self._write_message(writer, item, context)
        return True


__all__ = ["AttachmentEmitter", "DEFAULT_MIMETYPE", "MessageWriter"]
