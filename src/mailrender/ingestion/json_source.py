"""Item source reading mailbox item trees from JSON documents.

The document has two keys: ``root``, the top-level item (usually a folder
with ``children``), and ``blobs``, base64 payloads addressed by attachment
``fetch_id``. Embedded messages keep their raw ``item`` mapping and are only
validated when the assembler asks for them.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from ..core.interfaces import MissingAttachmentData, UnparseableEmbeddedItem
from ..core.models import (
    Appointment,
    AttachMethod,
    AttachmentRef,
    BodyText,
    Contact,
    ExtraField,
    ItemType,
    Journal,
    MailEnvelope,
    MailItem,
)

LOGGER = logging.getLogger(__name__)


def _check_base64(value: str) -> str:
    try:
        base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 payload: {exc}") from exc
    return value


# Inline payloads are checked on load so that conversion never fails later.
Base64Payload = Annotated[str, AfterValidator(_check_base64)]


def _decode_base64(value: str | None) -> bytes | None:
    if value is None:
        return None
    return base64.b64decode(value, validate=True)


class BodyRecord(BaseModel):
    """Body given either as text or as base64 ``data``."""

    model_config = ConfigDict(extra="forbid")

    text: str | None = None
    data: Base64Payload | None = None
    utf8: bool = False

    def to_body(self) -> BodyText:
        """Convert into the domain representation."""
        if self.data is not None:
            return BodyText(data=_decode_base64(self.data) or b"", is_utf8=self.utf8)
        return BodyText(data=(self.text or "").encode("utf-8"), is_utf8=True)


class EnvelopeRecord(BaseModel):
    """Mail envelope of an item."""

    header: str | None = None
    sender_address: str | None = None
    sender_name: str | None = None
    to: str | None = None
    cc: str | None = None
    bcc: str | None = None
    message_id: str | None = None
    sent_date: datetime | None = None
    html_body: BodyRecord | None = None
    report_text: BodyRecord | None = None
    rtf_compressed: Base64Payload | None = None
    encrypted_body: Base64Payload | None = None
    encrypted_html_body: Base64Payload | None = None

    def to_envelope(self) -> MailEnvelope:
        """Convert into the domain representation."""
        return MailEnvelope(
            header=self.header,
            sender_address=self.sender_address,
            sender_name=self.sender_name,
            sent_to=self.to,
            cc=self.cc,
            bcc=self.bcc,
            message_id=self.message_id,
            sent_date=self.sent_date,
            html_body=self.html_body.to_body() if self.html_body else None,
            report_text=self.report_text.to_body() if self.report_text else None,
            rtf_compressed=_decode_base64(self.rtf_compressed),
            encrypted_body=_decode_base64(self.encrypted_body),
            encrypted_html_body=_decode_base64(self.encrypted_html_body),
        )


class AttachmentRecord(BaseModel):
    """Attachment entry; embedded items stay raw until requested."""

    method: AttachMethod = AttachMethod.NORMAL
    mimetype: str | None = None
    filename: str | None = None
    long_filename: str | None = None
    content_id: str | None = None
    data: Base64Payload | None = None
    fetch_id: int | None = None
    item: Any = None

    def to_attachment(self) -> AttachmentRef:
        """Convert into the domain representation."""
        return AttachmentRef(
            method=self.method,
            mimetype=self.mimetype,
            filename=self.filename,
            long_filename=self.long_filename,
            content_id=self.content_id,
            data=_decode_base64(self.data),
            fetch_id=self.fetch_id,
            embedded=self.item,
        )


class ItemRecord(BaseModel):
    """One item of the tree."""

    type: ItemType
    subject: str | None = None
    body: BodyRecord | None = None
    comment: str | None = None
    email: EnvelopeRecord | None = None
    appointment: Appointment | None = None
    journal: Journal | None = None
    contact: Contact | None = None
    create_date: datetime | None = None
    modify_date: datetime | None = None
    read: bool = False
    extra_fields: list[ExtraField] = Field(default_factory=list)
    attachments: list[AttachmentRecord] = Field(default_factory=list)
    block_id: int = 0
    body_charset: str | None = None
    message_codepage: int | None = None
    internet_cpid: int | None = None
    file_as: str | None = None
    item_count: int = 0
    children: list[ItemRecord] = Field(default_factory=list)

    def to_item(self) -> MailItem:
        """Convert the record and its children into domain items."""
        return MailItem(
            item_type=self.type,
            subject=self.subject,
            body=self.body.to_body() if self.body else None,
            comment=self.comment,
            email=self.email.to_envelope() if self.email else None,
            appointment=self.appointment,
            journal=self.journal,
            contact=self.contact,
            create_date=self.create_date,
            modify_date=self.modify_date,
            is_read=self.read,
            extra_fields=list(self.extra_fields),
            attachments=[record.to_attachment() for record in self.attachments],
            block_id=self.block_id,
            body_charset=self.body_charset,
            message_codepage=self.message_codepage,
            internet_cpid=self.internet_cpid,
            file_as=self.file_as,
            item_count=self.item_count,
            children=[child.to_item() for child in self.children],
        )


class ItemDocument(BaseModel):
    """Top-level JSON document."""

    root: ItemRecord
    blobs: dict[int, str] = Field(default_factory=dict)


class JsonItemSource:
    """Serve items, attachment bytes and embedded items from one JSON document."""

    def __init__(self, document: ItemDocument) -> None:
        """Wrap an already validated document."""
        self._document = document

    @classmethod
    def from_path(cls, path: Path | str) -> JsonItemSource:
        """Load and validate the document stored at ``path``."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.from_json(raw)

    @classmethod
    def from_json(cls, raw: str) -> JsonItemSource:
        """Validate a JSON string."""
        return cls(ItemDocument.model_validate(json.loads(raw)))

    def root(self) -> MailItem:
        """Return the root item with its whole subtree."""
        return self._document.root.to_item()

    def fetch(self, fetch_id: int) -> bytes:
        """Return the blob stored under ``fetch_id``."""
        encoded = self._document.blobs.get(fetch_id)
        if encoded is None:
            raise MissingAttachmentData(f"no blob with id {fetch_id}")
        try:
            return base64.b64decode(encoded, validate=True)
        except binascii.Error as exc:
            raise MissingAttachmentData(f"blob {fetch_id} is not valid base64") from exc

    def load_embedded(self, attachment: AttachmentRef) -> MailItem:
        """Parse the item carried by an embedded attachment."""
        if not isinstance(attachment.embedded, dict):
            raise UnparseableEmbeddedItem("embedded attachment carries no item")
        try:
            record = ItemRecord.model_validate(attachment.embedded)
        except ValidationError as exc:
            LOGGER.debug("Embedded item validation failed: %s", exc)
            raise UnparseableEmbeddedItem(
                f"embedded item is invalid ({exc.error_count()} errors)"
            ) from exc
        return record.to_item()


__all__ = [
    "AttachmentRecord",
    "BodyRecord",
    "EnvelopeRecord",
    "ItemDocument",
    "ItemRecord",
    "JsonItemSource",
]
