"""Hour bucketing of raw history points.

Truncation happens on the wall clock of an explicitly named time zone, never
the host's. Bucket keys are the truncated instant in fixed-width UTC ISO form
(``2025-01-10T07:00:00Z``), so sorting keys as strings sorts them in time.

Date/Time: Uses `whenever` library (UTC-first, Rust-backed).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from whenever import OffsetDateTime, PlainDateTime, TimeDelta

from shift_compare.errors import TimestampParseError
from shift_compare.models import HourBucket

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from whenever import ZonedDateTime

    from shift_compare.models import ProductionMetric, RawPoint

_EMPTY_BUCKET = HourBucket()


def parse_timestamp(timestamp: str, tz: str) -> ZonedDateTime:
    """Parse an ISO 8601 history timestamp into ``tz``.

    Timestamps with an offset (or ``Z``) are exact instants. Timestamps without
    one are read as wall-clock time in ``tz``: a time skipped by a DST change
    moves forward, a repeated one takes its earlier occurrence.
    """
    try:
        exact = OffsetDateTime.parse_iso(timestamp)
    except ValueError:
        pass
    else:
        return exact.to_tz(tz)

    try:
        local = PlainDateTime.parse_iso(timestamp)
    except ValueError as exc:
        raise TimestampParseError(timestamp) from exc
    return local.assume_tz(tz, disambiguation="compatible")


def truncate_to_hour(timestamp: str, tz: str = "UTC") -> str:
    """Floor ``timestamp`` to the start of its hour in ``tz`` and return the hour key.

    Idempotent: truncating an hour key yields the same key.
    """
    local = parse_timestamp(timestamp, tz)
    into_hour = TimeDelta(minutes=local.minute, seconds=local.second, nanoseconds=local.nanosecond)
    return (local.to_instant() - into_hour).format_iso()


def aggregate_hourly(
    points_by_metric: Mapping[ProductionMetric, Iterable[RawPoint]],
    tz: str = "UTC",
) -> dict[str, HourBucket]:
    """Fold every point into its hour bucket.

    A point's value is assigned, not added: when two points of the same metric
    land in the same hour, the later one in iteration order wins.
    """
    buckets: dict[str, HourBucket] = {}
    for metric, points in points_by_metric.items():
        for point in points:
            key = truncate_to_hour(point.timestamp, tz)
            buckets[key] = buckets.get(key, _EMPTY_BUCKET).with_value(metric, point.value)
    return buckets
