"""
Date/time helpers for booking instants.

Booking instants are timezone-naive local date + time pairs. The date and the
time are edited through separate pickers, so they are stored separately and
only combined when two instants have to be compared.
"""

from datetime import date, datetime, time
from typing import NamedTuple

WIRE_DATE_FORMAT = "%d-%m-%Y"
WIRE_TIME_FORMAT = "%H:%M:%S"


class DateRange(NamedTuple):
    """The four picker values that make up a booking's from/to range."""

    from_date: date | None
    from_time: time | None
    to_date: date | None
    to_time: time | None


def combine(day: date | None, at: time | None) -> datetime | None:
    """Combine a date and a time into one naive instant (None if either is missing)."""
    if day is None or at is None:
        return None
    return datetime.combine(day, at)


def is_valid_range(value: DateRange) -> bool:
    """
    Whether the "to" instant is at or after the "from" instant.

    An incomplete range is not a range error; missing pickers are reported
    by their own presence rules.
    """
    start = combine(value.from_date, value.from_time)
    end = combine(value.to_date, value.to_time)
    if start is None or end is None:
        return True
    return end >= start


def reconcile_date_range(previous: DateRange, proposed: DateRange) -> DateRange:
    """
    Apply the one-directional corrections for an edit of the booking range.

    - Moving the from-date past the to-date pulls the whole "to" instant up to
      the new "from" instant.
    - Moving the from-time (or the from-date, or the to-date) on a single-day
      booking pushes the to-time up when it would otherwise precede the
      from-time.

    Editing the to-time alone never corrects anything, and no rule ever moves
    the "from" side.
    """
    from_date, from_time, to_date, to_time = proposed

    from_date_changed = from_date != previous.from_date
    from_time_changed = from_time != previous.from_time
    to_date_changed = to_date != previous.to_date

    if from_date_changed and from_date and to_date and from_date > to_date:
        to_date = from_date
        if from_time is not None:
            to_time = from_time
    elif (
        (from_date_changed or from_time_changed or to_date_changed)
        and from_date and to_date and from_date == to_date
        and from_time is not None and to_time is not None
        and to_time < from_time
    ):
        to_time = from_time

    return DateRange(from_date, from_time, to_date, to_time)


def format_wire_date(value: date | datetime | None) -> str:
    """DD-MM-YYYY, or "" when missing."""
    if value is None:
        return ""
    return value.strftime(WIRE_DATE_FORMAT)


def format_wire_time(value: time | datetime | None) -> str:
    """HH:MM:SS, or "" when missing."""
    if value is None:
        return ""
    return value.strftime(WIRE_TIME_FORMAT)


def parse_wire_date(text: str | None) -> date | None:
    """Parse DD-MM-YYYY (or ISO YYYY-MM-DD). Unparseable input gives None."""
    if not text:
        return None
    text = str(text).strip()
    for fmt in (WIRE_DATE_FORMAT, "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_wire_time(text: str | None) -> time | None:
    """Parse HH:MM:SS or HH:MM. Unparseable input gives None."""
    if not text:
        return None
    text = str(text).strip()
    for fmt in (WIRE_TIME_FORMAT, "%H:%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None
