"""Default shift windows and shift display labels.

Until shift schedules are read from the plant calendar, the comparison uses a
fixed day shift (06:00-18:00 local by default): the current shift is today's,
or yesterday's before the shift has started, and the previous shift is the
same window one day earlier.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from whenever import ZonedDateTime

from shift_compare.bucketing import parse_timestamp
from shift_compare.models import ShiftWindow

if TYPE_CHECKING:
    from collections.abc import Sequence

    from whenever import Date, Instant

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def default_shift_windows(
    now: Instant,
    tz: str = "UTC",
    *,
    start_hour: int = 6,
    end_hour: int = 18,
) -> tuple[ShiftWindow, ShiftWindow]:
    """Return ``(current, previous)`` shift windows as UTC ISO strings."""
    local = now.to_tz(tz)
    day = local.date()
    if local.hour < start_hour:
        day = day.subtract(days=1)

    current = _window(day, start_hour, end_hour, tz)
    previous = _window(day.subtract(days=1), start_hour, end_hour, tz)
    return current, previous


def resolve_shift_windows(
    now: Instant,
    tz: str = "UTC",
    *,
    current_start: str | None = None,
    current_end: str | None = None,
    previous_start: str | None = None,
    previous_end: str | None = None,
    current_filter: str | None = None,
    previous_filter: str | None = None,
    dims: Sequence[str] | None = None,
    start_hour: int = 6,
    end_hour: int = 18,
) -> tuple[ShiftWindow, ShiftWindow]:
    """Build both shift windows from optional explicit bounds.

    A shift given with both bounds is used as is; a shift given with neither
    falls back to the default shift. Half-given bounds raise ValueError, and
    malformed timestamps raise TimestampParseError.
    """
    default_current, default_previous = default_shift_windows(
        now, tz, start_hour=start_hour, end_hour=end_hour
    )
    qualifiers = tuple(dims) if dims else None
    current = _explicit_or_default(
        "current", current_start, current_end, default_current, tz
    ).model_copy(update={"filter": current_filter, "dims": qualifiers})
    previous = _explicit_or_default(
        "previous", previous_start, previous_end, default_previous, tz
    ).model_copy(update={"filter": previous_filter, "dims": qualifiers})
    return current, previous


def _explicit_or_default(
    name: str,
    start: str | None,
    end: str | None,
    default: ShiftWindow,
    tz: str,
) -> ShiftWindow:
    if start is None and end is None:
        return default
    if start is None or end is None:
        raise ValueError(f"{name}_start and {name}_end must be given together")
    parse_timestamp(start, tz)
    parse_timestamp(end, tz)
    return ShiftWindow(start=start, end=end)


def _window(day: Date, start_hour: int, end_hour: int, tz: str) -> ShiftWindow:
    return ShiftWindow(
        start=_at_hour(day, start_hour, tz).format_iso(),
        end=_at_hour(day, end_hour, tz).format_iso(),
    )


def _at_hour(day: Date, hour: int, tz: str) -> Instant:
    # hour 24 is midnight at the end of ``day``
    if hour == 24:
        day, hour = day.add(days=1), 0
    return ZonedDateTime(
        day.year, day.month, day.day, hour, tz=tz, disambiguation="compatible"
    ).to_instant()


def format_shift_label(window: ShiftWindow, tz: str = "UTC") -> str:
    """Human label for a shift, e.g. ``Jan 10 (6:00 AM - 6:00 PM)``."""
    start = parse_timestamp(window.start, tz)
    end = parse_timestamp(window.end, tz)
    return f"{_MONTHS[start.month - 1]} {start.day} ({_clock(start)} - {_clock(end)})"


def _clock(moment: ZonedDateTime) -> str:
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"
