"""Assembly of complete RFC822 documents from mail items."""

from __future__ import annotations

import logging
from enum import Enum

from compressed_rtf import decompress

from ..calendar.ical import CalendarSerializer
from ..core.config import OutputSettings
from ..core.datetime_utils import rfc2445_now, rfc2822_datetime
from ..core.encoding import default_charset, encode_header_value, format_sender
from ..core.interfaces import AttachmentSource, ItemLoader, RtfDecompressor
from ..core.models import (
    AttachmentRef,
    HeaderBlock,
    HeaderContext,
    ItemType,
    MailEnvelope,
    MailItem,
)
from ..core.stream import DocumentWriter
from .attachments import AttachmentEmitter
from .body import BodyPartEncoder
from .boundaries import Boundaries, BoundaryAllocator, outer_content_type
from .headers import HeaderAnalyzer

LOGGER = logging.getLogger(__name__)

RTF_ATTACH_NAME = "rtf-body.rtf"
RTF_ATTACH_TYPE = "application/rtf"
SCHEDULE_METHOD = "REQUEST"


class AssemblyState(str, Enum):
    """Stages a message passes through, strictly in this order."""

    START = "start"
    HEADERS_RESOLVED = "headers_resolved"
    ENVELOPE_WRITTEN = "envelope_written"
    BODY_WRITTEN = "body_written"
    ATTACHMENTS_WRITTEN = "attachments_written"
    CLOSED = "closed"


class MessageAssembler:
    """Produce one RFC822 document per mail item, recursing into embedded mail."""

    def __init__(
        self,
        settings: OutputSettings | None = None,
        *,
        source: AttachmentSource | None = None,
        loader: ItemLoader | None = None,
        rtf_decompressor: RtfDecompressor | None = None,
        allocator: BoundaryAllocator | None = None,
        calendar: CalendarSerializer | None = None,
    ) -> None:
        # pylint: disable=too-many-arguments
        """Initialise the assembler and the part writers it drives."""
        self._settings = settings or OutputSettings()
        self._analyzer = HeaderAnalyzer()
        self._allocator = allocator or BoundaryAllocator(self._settings.boundary_prefix)
        self._bodies = BodyPartEncoder()
        self._attachments = AttachmentEmitter(
            self.write_message, source=source, loader=loader
        )
        self._calendar = calendar or CalendarSerializer(
            prodid=self._settings.prodid,
            fallback_charset=self._settings.default_charset,
        )
        self._decompress_rtf = rtf_decompressor or decompress

    def render(self, item: MailItem) -> bytes:
        """Return the complete document for a top-level mail item."""
        writer = DocumentWriter()
        self.write_message(writer, item, HeaderContext())
        return writer.getvalue()

    def write_message(
        self, writer: DocumentWriter, item: MailItem, context: HeaderContext
    ) -> None:
        """Write ``item`` as a complete message onto ``writer``.

        ``context`` carries the header groups of the outermost message and is
        shared with every embedded message written beneath it.
        """
        envelope = item.email
        if envelope is None:
            raise ValueError("item has no mail envelope")
        state = AssemblyState.START
        LOGGER.debug("Assembling %s message %r", item.item_type.value, item.subject)

        block = self._analyzer.resolve(
            envelope.header, context, sender_address=envelope.sender_address
        )
        boundaries = self._allocator.allocate(
            with_alternative=item.body is not None and envelope.html_body is not None
        )
        state = self._advance(state, AssemblyState.HEADERS_RESOLVED)

        self._write_envelope(writer, item, envelope, block, boundaries)
        state = self._advance(state, AssemblyState.ENVELOPE_WRITTEN)

        charset = block.charset or default_charset(item, self._settings.default_charset)
        self._write_bodies(writer, item, envelope, charset, boundaries)
        state = self._advance(state, AssemblyState.BODY_WRITTEN)

        self._promote_synthetic_attachments(item, envelope)
        if item.item_type is ItemType.SCHEDULE and item.appointment is not None:
            self._write_schedule_parts(writer, item, block.sender, boundaries.outer)
        for attachment in list(item.attachments):
            self._attachments.write(
                writer, attachment, boundary=boundaries.outer, context=context
            )
        state = self._advance(state, AssemblyState.ATTACHMENTS_WRITTEN)

        writer.write(f"\n--{boundaries.outer}--\n\n")
        self._advance(state, AssemblyState.CLOSED)
        LOGGER.debug(
            "Message %r complete, %d bytes written", item.subject, writer.written
        )

    @staticmethod
    def _advance(current: AssemblyState, target: AssemblyState) -> AssemblyState:
        LOGGER.debug("Message assembly %s -> %s", current.value, target.value)
        return target

    def _write_envelope(
        self,
        writer: DocumentWriter,
        item: MailItem,
        envelope: MailEnvelope,
        block: HeaderBlock,
        boundaries: Boundaries,
    ) -> None:
        # pylint: disable=too-many-arguments
        if block.text:
            writer.write(block.text)
            if not block.text.endswith("\n"):
                writer.line()

        if item.is_read:
            writer.line("Status: RO")

        if not block.has_from:
            writer.line(f"From: {format_sender(envelope.sender_name, block.sender)}")
        if not block.has_subject:
            subject = encode_header_value(item.subject) if item.subject else ""
            writer.line(f"Subject: {subject}")
        if not block.has_to and envelope.sent_to:
            writer.line(f"To: {encode_header_value(envelope.sent_to)}")
        if not block.has_cc and envelope.cc:
            writer.line(f"Cc: {encode_header_value(envelope.cc)}")
        if not block.has_date and envelope.sent_date:
            writer.line(f"Date: {rfc2822_datetime(envelope.sent_date)}")
        if not block.has_msgid and envelope.message_id:
            writer.line(f"Message-Id: {envelope.message_id}")

        forensic = self._settings.forensic_header_prefix
        sender_token = envelope.sender_address
        if sender_token and "@" not in sender_token and sender_token != ".":
            writer.line(f"{forensic}sender: {sender_token}")
        if envelope.bcc:
            writer.line(f"{forensic}bcc: {envelope.bcc}")

        writer.line("MIME-Version: 1.0")
        content_type = outer_content_type(item, block.report_type)
        writer.line(f'Content-Type: {content_type};\n\tboundary="{boundaries.outer}"')
        writer.line()

    def _write_bodies(
        self,
        writer: DocumentWriter,
        item: MailItem,
        envelope: MailEnvelope,
        charset: str,
        boundaries: Boundaries,
    ) -> None:
        # pylint: disable=too-many-arguments
        if item.item_type is ItemType.REPORT and envelope.report_text is not None:
            self._bodies.write(
                writer,
                envelope.report_text,
                mimetype="text/plain",
                charset=charset,
                boundary=boundaries.outer,
            )
            writer.line()

        target = boundaries.outer
        if boundaries.alternative is not None:
            writer.write(f"\n--{boundaries.outer}\n")
            writer.line(
                f'Content-Type: multipart/alternative;\n\tboundary="{boundaries.alternative}"'
            )
            target = boundaries.alternative

        if item.body is not None:
            self._bodies.write(
                writer, item.body, mimetype="text/plain", charset=charset, boundary=target
            )
        if envelope.html_body is not None:
            self._bodies.write(
                writer,
                envelope.html_body,
                mimetype="text/html",
                charset=charset,
                boundary=target,
            )

        if boundaries.alternative is not None:
            writer.write(f"\n--{boundaries.alternative}--\n")

    def _promote_synthetic_attachments(
        self, item: MailItem, envelope: MailEnvelope
    ) -> None:
        """Turn bodies that cannot be written as text into attachments.

        Each promoted attachment goes to the front of the list, so the last
        one promoted is written first.
        """
        if envelope.rtf_compressed is not None:
            try:
                rtf = self._decompress_rtf(envelope.rtf_compressed)
            except Exception as exc:  # pylint: disable=broad-except
                LOGGER.warning("Dropping RTF body that failed to decompress: %s", exc)
            else:
                LOGGER.debug("Adding RTF body as attachment")
                item.attachments.insert(
                    0,
                    AttachmentRef(
                        mimetype=RTF_ATTACH_TYPE, long_filename=RTF_ATTACH_NAME, data=rtf
                    ),
                )

        if envelope.encrypted_body is not None:
            LOGGER.debug("Adding encrypted text body as attachment")
            item.attachments.insert(0, AttachmentRef(data=envelope.encrypted_body))
            envelope.encrypted_body = None

        if envelope.encrypted_html_body is not None:
            LOGGER.debug("Adding encrypted HTML body as attachment")
            item.attachments.insert(0, AttachmentRef(data=envelope.encrypted_html_body))
            envelope.encrypted_html_body = None

    def _write_schedule_parts(
        self, writer: DocumentWriter, item: MailItem, sender: str, boundary: str
    ) -> None:
        """Offer a meeting request inline and again as an ``.ics`` attachment."""
        stamp = rfc2445_now()
        writer.write(f"\n--{boundary}\n")
        writer.line(
            f'Content-Type: text/calendar; method="{SCHEDULE_METHOD}"; charset="utf-8"'
        )
        writer.line()
        self._calendar.write_calendar(
            writer, item, method=SCHEDULE_METHOD, organizer=sender, stamp=stamp
        )
        writer.line()

        filename = f"i{self._allocator.nonce()}.ics"
        writer.write(f"\n--{boundary}\n")
        writer.line(f'Content-Type: text/calendar; charset="utf-8"; name="{filename}"')
        writer.line(f'Content-Disposition: attachment; filename="{filename}"')
        writer.line()
        self._calendar.write_calendar(
            writer, item, method=SCHEDULE_METHOD, organizer=sender, stamp=stamp
        )
        writer.line()


__all__ = [
    "AssemblyState",
    "MessageAssembler",
    "RTF_ATTACH_NAME",
    "RTF_ATTACH_TYPE",
]
