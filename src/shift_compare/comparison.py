"""Shift comparison logic - joins two shifts' hour buckets onto one timeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from whenever import Instant

from shift_compare.models import HourBucket, ShiftHourPoint

if TYPE_CHECKING:
    from collections.abc import Mapping

_EMPTY_BUCKET = HourBucket()


def merge_shift_buckets(
    current: Mapping[str, HourBucket],
    previous: Mapping[str, HourBucket],
    tz: str = "UTC",
) -> list[ShiftHourPoint]:
    """Produce one record per hour key present in either shift, in time order.

    Hours missing from one shift are zero-filled on that side. ``hour_index`` is
    the position in the returned list, not the hour of day.
    """
    points: list[ShiftHourPoint] = []
    for index, hour in enumerate(sorted(current.keys() | previous.keys())):
        cur = current.get(hour, _EMPTY_BUCKET)
        prev = previous.get(hour, _EMPTY_BUCKET)
        points.append(
            ShiftHourPoint(
                hour_label=format_hour_label(hour, tz),
                hour_index=index,
                current_good=cur.good_parts,
                current_reject=cur.reject_parts,
                current_downtime=cur.downtime_minutes,
                previous_good=prev.good_parts,
                previous_reject=prev.reject_parts,
                previous_downtime=prev.downtime_minutes,
            )
        )
    return points


def format_hour_label(hour_key: str, tz: str = "UTC") -> str:
    """``HH:MM`` (24-hour) of an hour key on the wall clock of ``tz``."""
    local = Instant.parse_iso(hour_key).to_tz(tz)
    return f"{local.hour:02d}:{local.minute:02d}"
