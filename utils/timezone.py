"""Clock access. Event timestamps are UTC; booking instants are naive local."""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo


def now_utc() -> datetime:
    """
    Current time in UTC.

    Used for event and response timestamps.
    """
    return datetime.now(timezone.utc)


def now_local(tz_name: str | None = None) -> datetime:
    """
    Current wall-clock time as a naive datetime.

    Booking instants are stored without a timezone, so the hotel's local time
    is taken and the tzinfo dropped.

    Raises:
        ValueError: If the timezone name is unknown
    """
    if tz_name is None:
        return datetime.now().replace(microsecond=0)

    try:
        local_tz = ZoneInfo(tz_name)
    except KeyError:
        raise ValueError(f"Unknown timezone: {tz_name}")

    return datetime.now(local_tz).replace(tzinfo=None, microsecond=0)


def today_local(tz_name: str | None = None) -> date:
    """Current local calendar day."""
    return now_local(tz_name).date()


def current_time_local(tz_name: str | None = None) -> time:
    """Current local time of day, to the second."""
    return now_local(tz_name).time()
