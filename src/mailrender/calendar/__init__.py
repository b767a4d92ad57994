"""iCalendar serialization."""

from .ical import CalendarSerializer
from .recurrence import encode_rrule

__all__ = ["CalendarSerializer", "encode_rrule"]
