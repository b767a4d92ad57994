"""iCalendar output for appointments, meeting requests and journal entries."""

from __future__ import annotations

import logging

from ..core.datetime_utils import rfc2445_datetime, rfc2445_now
from ..core.encoding import default_charset, escape_directory_text, keyword_categories
from ..core.models import Appointment, AppointmentLabel, FreeBusy, MailItem
from ..core.stream import DocumentWriter
from .recurrence import encode_rrule

LOGGER = logging.getLogger(__name__)

DEFAULT_PRODID = "-//mailrender//mailrender//EN"

# Free marks the event transparent and still confirms it, so free, busy and
# out-of-office all end in the same STATUS line.
FREE_BUSY_LINES: dict[FreeBusy, tuple[str, ...]] = {
    FreeBusy.TENTATIVE: ("STATUS:TENTATIVE",),
    FreeBusy.FREE: ("TRANSP:TRANSPARENT", "STATUS:CONFIRMED"),
    FreeBusy.BUSY: ("STATUS:CONFIRMED",),
    FreeBusy.OUT_OF_OFFICE: ("STATUS:CONFIRMED",),
}

LABEL_CATEGORIES: dict[AppointmentLabel, str] = {
    AppointmentLabel.IMPORTANT: "IMPORTANT",
    AppointmentLabel.BUSINESS: "BUSINESS",
    AppointmentLabel.PERSONAL: "PERSONAL",
    AppointmentLabel.VACATION: "VACATION",
    AppointmentLabel.MUST_ATTEND: "MUST-ATTEND",
    AppointmentLabel.TRAVEL_REQUIRED: "TRAVEL-REQUIRED",
    AppointmentLabel.NEEDS_PREPARATION: "NEEDS-PREPARATION",
    AppointmentLabel.BIRTHDAY: "BIRTHDAY",
    AppointmentLabel.ANNIVERSARY: "ANNIVERSARY",
    AppointmentLabel.PHONE_CALL: "PHONE-CALL",
}

MAX_ALARM_MINUTES = 1440


class CalendarSerializer:
    """Write VEVENT and VJOURNAL documents."""

    def __init__(
        self, *, prodid: str = DEFAULT_PRODID, fallback_charset: str = "iso-8859-1"
    ) -> None:
        """Configure the product identifier and the default body charset."""
        self._prodid = prodid
        self._fallback_charset = fallback_charset

    # Whole documents ---------------------------------------------------------
    def render_appointment(self, item: MailItem) -> bytes:
        """Return a complete calendar document for an appointment item."""
        writer = DocumentWriter()
        self.write_calendar(writer, item)
        return writer.getvalue()

    def render_journal(self, item: MailItem) -> bytes:
        """Return a complete calendar document for a journal item."""
        writer = DocumentWriter()
        self._begin(writer, method=None)
        self.write_journal(writer, item)
        writer.line("END:VCALENDAR")
        return writer.getvalue()

    def write_calendar(
        self,
        writer: DocumentWriter,
        item: MailItem,
        *,
        method: str | None = None,
        organizer: str | None = None,
        stamp: str | None = None,
    ) -> None:
        # pylint: disable=too-many-arguments
        """Write a VCALENDAR holding one VEVENT for ``item``.

        ``organizer`` is the sender address of a meeting request; its display
        name comes from the item's envelope. ``stamp`` fixes DTSTAMP so that
        several copies of one event stay identical; it defaults to now.
        """
        self._begin(writer, method=method)
        writer.line("BEGIN:VEVENT")
        if organizer:
            name = item.email.sender_name if item.email else None
            writer.line(f'ORGANIZER;CN="{name or ""}":MAILTO:{organizer}')
        self.write_event_properties(writer, item, stamp=stamp)
        writer.line("END:VEVENT")
        writer.line("END:VCALENDAR")

    def _begin(self, writer: DocumentWriter, *, method: str | None) -> None:
        writer.line("BEGIN:VCALENDAR")
        writer.line("VERSION:2.0")
        writer.line(f"PRODID:{self._prodid}")
        if method:
            writer.line(f"METHOD:{method}")

    # Components --------------------------------------------------------------
    def write_journal(self, writer: DocumentWriter, item: MailItem) -> None:
        """Write one VJOURNAL component."""
        writer.line("BEGIN:VJOURNAL")
        self._write_common(writer, item)
        if item.journal and item.journal.start:
            writer.line(f"DTSTART;VALUE=DATE-TIME:{rfc2445_datetime(item.journal.start)}")
        writer.line("END:VJOURNAL")

    def write_event_properties(
        self, writer: DocumentWriter, item: MailItem, *, stamp: str | None = None
    ) -> None:
        """Write the properties of a VEVENT, without its BEGIN/END lines."""
        appointment = item.appointment
        writer.line(f"UID:{item.block_id:#x}")
        self._write_common(writer, item, stamp)
        if appointment is None:
            return
        if appointment.start:
            writer.line(f"DTSTART;VALUE=DATE-TIME:{rfc2445_datetime(appointment.start)}")
        if appointment.end:
            writer.line(f"DTEND;VALUE=DATE-TIME:{rfc2445_datetime(appointment.end)}")
        if appointment.location:
            writer.line(f"LOCATION:{escape_directory_text(appointment.location)}")
        for line in FREE_BUSY_LINES.get(appointment.show_as, ()):
            writer.line(line)
        if appointment.recurrence is not None:
            writer.line(encode_rrule(appointment.recurrence))
        writer.line(self._categories(item, appointment))
        self._write_alarm(writer, appointment)

    def _write_common(
        self, writer: DocumentWriter, item: MailItem, stamp: str | None = None
    ) -> None:
        writer.line(f"DTSTAMP:{stamp or rfc2445_now()}")
        if item.create_date:
            writer.line(f"CREATED:{rfc2445_datetime(item.create_date)}")
        if item.modify_date:
            writer.line(f"LAST-MOD:{rfc2445_datetime(item.modify_date)}")
        if item.subject:
            writer.line(f"SUMMARY:{escape_directory_text(item.subject)}")
        if item.body:
            charset = default_charset(item, self._fallback_charset)
            writer.line(f"DESCRIPTION:{escape_directory_text(item.body.decode(charset))}")

    @staticmethod
    def _categories(item: MailItem, appointment: Appointment) -> str:
        # Only unlabelled appointments fall back to the item's Keywords.
        if appointment.label is AppointmentLabel.NONE:
            return keyword_categories(item) or "CATEGORIES:NONE"
        return f"CATEGORIES:{LABEL_CATEGORIES[appointment.label]}"

    @staticmethod
    def _write_alarm(writer: DocumentWriter, appointment: Appointment) -> None:
        if not appointment.alarm:
            return
        if not 0 <= appointment.alarm_minutes < MAX_ALARM_MINUTES:
            LOGGER.debug("Ignoring bogus alarm of %d minutes", appointment.alarm_minutes)
            return
        writer.line("BEGIN:VALARM")
        writer.line(f"TRIGGER:-PT{appointment.alarm_minutes}M")
        writer.line("ACTION:DISPLAY")
        writer.line("DESCRIPTION:Reminder")
        writer.line("END:VALARM")


__all__ = [
    "CalendarSerializer",
    "DEFAULT_PRODID",
    "FREE_BUSY_LINES",
    "LABEL_CATEGORIES",
]
