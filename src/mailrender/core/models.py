"""Core domain models describing mailbox items handed to the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ItemType(str, Enum):
    """Kind of record yielded by the container parser."""

    NOTE = "note"
    REPORT = "report"
    SCHEDULE = "schedule"
    APPOINTMENT = "appointment"
    JOURNAL = "journal"
    CONTACT = "contact"
    FOLDER = "folder"
    STORE = "store"


class AttachMethod(str, Enum):
    """How an attachment payload is stored."""

    NORMAL = "normal"
    EMBEDDED = "embedded"


class FreeBusy(str, Enum):
    """Availability classification of an appointment."""

    FREE = "free"
    TENTATIVE = "tentative"
    BUSY = "busy"
    OUT_OF_OFFICE = "out_of_office"


class AppointmentLabel(str, Enum):
    """Colour label assigned to an appointment."""

    NONE = "none"
    IMPORTANT = "important"
    BUSINESS = "business"
    PERSONAL = "personal"
    VACATION = "vacation"
    MUST_ATTEND = "must_attend"
    TRAVEL_REQUIRED = "travel_required"
    NEEDS_PREPARATION = "needs_preparation"
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    PHONE_CALL = "phone_call"


class Frequency(str, Enum):
    """Recurrence frequency."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(slots=True)
class BodyText:
    """Raw body bytes together with their UTF-8 marker."""

    data: bytes
    is_utf8: bool = False

    def decode(self, fallback_charset: str = "utf-8") -> str:
        """Return the body as text, replacing undecodable bytes."""
        charset = "utf-8" if self.is_utf8 else fallback_charset
        try:
            return self.data.decode(charset, errors="replace")
        except LookupError:
            return self.data.decode("utf-8", errors="replace")


@dataclass(slots=True)
class ExtraField:
    """Named property attached to an item."""

    name: str
    value: str


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class AttachmentRef:
    """Attachment owned by a single mail item."""

    method: AttachMethod = AttachMethod.NORMAL
    mimetype: str | None = None
    filename: str | None = None
    long_filename: str | None = None
    content_id: str | None = None
    data: bytes | None = None
    fetch_id: int | None = None
    embedded: Any = None


@dataclass(slots=True)
class RecurrencePattern:
    """Decoded recurrence rule of an appointment."""

    frequency: Frequency
    interval: int = 1
    count: int = 0
    day_of_month: int = 0
    month_of_year: int = 0
    position: int = 0
    weekday_mask: int = 0


@dataclass(slots=True)
class Appointment:
    """Scheduling details of an appointment or meeting request."""

    start: datetime | None = None
    end: datetime | None = None
    location: str | None = None
    show_as: FreeBusy | None = None
    label: AppointmentLabel = AppointmentLabel.NONE
    alarm: bool = False
    alarm_minutes: int = 0
    recurrence: RecurrencePattern | None = None


@dataclass(slots=True)
class Journal:
    """Journal entry details."""

    start: datetime | None = None


@dataclass(slots=True)
class PostalAddress:
    """One structured postal address of a contact."""

    label: str
    po_box: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class Contact:
    """Address book entry."""

    fullname: str | None = None
    surname: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    display_name_prefix: str | None = None
    suffix: str | None = None
    nickname: str | None = None
    address1: str | None = None
    address2: str | None = None
    address3: str | None = None
    birthday: datetime | None = None
    home_address: PostalAddress | None = None
    business_address: PostalAddress | None = None
    other_address: PostalAddress | None = None
    business_fax: str | None = None
    business_phone: str | None = None
    business_phone2: str | None = None
    car_phone: str | None = None
    home_fax: str | None = None
    home_phone: str | None = None
    home_phone2: str | None = None
    isdn_phone: str | None = None
    mobile_phone: str | None = None
    other_phone: str | None = None
    pager_phone: str | None = None
    primary_fax: str | None = None
    primary_phone: str | None = None
    radio_phone: str | None = None
    telex: str | None = None
    callback_phone: str | None = None
    company_main_phone: str | None = None
    job_title: str | None = None
    profession: str | None = None
    assistant_name: str | None = None
    assistant_phone: str | None = None
    company_name: str | None = None


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class MailEnvelope:
    """Transport-level properties of a mail item."""

    header: str | None = None
    sender_address: str | None = None
    sender_name: str | None = None
    sent_to: str | None = None
    cc: str | None = None
    bcc: str | None = None
    message_id: str | None = None
    sent_date: datetime | None = None
    html_body: BodyText | None = None
    report_text: BodyText | None = None
    rtf_compressed: bytes | None = None
    encrypted_body: bytes | None = None
    encrypted_html_body: bytes | None = None


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class MailItem:
    """A single record extracted from a mailbox container."""

    item_type: ItemType
    subject: str | None = None
    body: BodyText | None = None
    comment: str | None = None
    email: MailEnvelope | None = None
    appointment: Appointment | None = None
    journal: Journal | None = None
    contact: Contact | None = None
    create_date: datetime | None = None
    modify_date: datetime | None = None
    is_read: bool = False
    extra_fields: list[ExtraField] = field(default_factory=list)
    attachments: list[AttachmentRef] = field(default_factory=list)
    block_id: int = 0
    body_charset: str | None = None
    message_codepage: int | None = None
    internet_cpid: int | None = None
    file_as: str | None = None
    item_count: int = 0
    children: list[MailItem] = field(default_factory=list)

    def keywords(self) -> list[str]:
        """Return the values of every ``Keywords`` extra field in order."""
        return [extra.value for extra in self.extra_fields if extra.name == "Keywords"]


@dataclass(slots=True)
class HeaderBlock:
    """Recovered header text plus the facts extracted from it."""

    text: str = ""
    has_from: bool = False
    has_to: bool = False
    has_subject: bool = False
    has_cc: bool = False
    has_date: bool = False
    has_msgid: bool = False
    charset: str | None = None
    report_type: str = "delivery-status"
    sender: str = "MAILER-DAEMON"


@dataclass(slots=True)
class HeaderContext:
    """Blank-line separated header groups carried through one outer message.

    The groups following the outer message's own headers describe the MIME
    parts of the original message; embedded messages look their real headers
    up here.
    """

    remainder: str | None = None


@dataclass(slots=True)
class ExportReport:
    """Outcome summary for one export run."""

    processed: int
    total: int
    documents: int


__all__ = [
    "Appointment",
    "AppointmentLabel",
    "AttachMethod",
    "AttachmentRef",
    "BodyText",
    "Contact",
    "ExportReport",
    "ExtraField",
    "FreeBusy",
    "Frequency",
    "HeaderBlock",
    "HeaderContext",
    "ItemType",
    "Journal",
    "MailEnvelope",
    "MailItem",
    "PostalAddress",
    "RecurrencePattern",
]
