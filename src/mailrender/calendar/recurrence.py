"""RRULE generation for recurring appointments."""

from __future__ import annotations

from ..core.models import Frequency, RecurrencePattern

_FREQUENCY_NAMES = {
    Frequency.DAILY: "DAILY",
    Frequency.WEEKLY: "WEEKLY",
    Frequency.MONTHLY: "MONTHLY",
    Frequency.YEARLY: "YEARLY",
}

# Index matches the bit position in the weekday mask, bit 0 being Sunday.
_WEEKDAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")

# Only Sunday through Friday are inspected; the Saturday bit is never read.
_SCANNED_WEEKDAYS = 6


def weekday_codes(mask: int) -> list[str]:
    """Return the two-letter codes of the weekdays selected in ``mask``."""
    return [
        _WEEKDAY_CODES[bit] for bit in range(_SCANNED_WEEKDAYS) if mask & (1 << bit)
    ]


def encode_rrule(pattern: RecurrencePattern) -> str:
    """Render ``pattern`` as a single ``RRULE`` content line."""
    rule = f"RRULE:FREQ={_FREQUENCY_NAMES[pattern.frequency]}"
    if pattern.count:
        rule += f";COUNT={pattern.count}"
    if pattern.interval and pattern.interval != 1:
        rule += f";INTERVAL={pattern.interval}"
    if pattern.day_of_month:
        rule += f";BYMONTHDAY={pattern.day_of_month}"
    if pattern.month_of_year:
        rule += f";BYMONTH={pattern.month_of_year}"
    if pattern.position:
        rule += f";BYSETPOS={pattern.position}"
    days = weekday_codes(pattern.weekday_mask)
    if days:
        rule += ";BYDAY=" + ";".join(days)
    return rule


__all__ = ["encode_rrule", "weekday_codes"]
