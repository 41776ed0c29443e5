"""Shift comparison pipeline.

fetch (both windows, concurrently) -> resolve modes -> bucket by hour (per
window) -> merge. The result is produced in one piece once every step has
completed; any failure fails the whole comparison.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shift_compare.bucketing import aggregate_hourly
from shift_compare.comparison import merge_shift_buckets
from shift_compare.fetcher import fetch_shift_histories
from shift_compare.modes import resolve_modes

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shift_compare.client import HistoryClient
    from shift_compare.models import (
        HourBucket,
        MetricSeriesResponse,
        ShiftHourPoint,
        ShiftWindow,
    )

logger = logging.getLogger("shift_compare.service")


async def compare_shifts(
    client: HistoryClient,
    machine_id: int,
    current: ShiftWindow,
    previous: ShiftWindow,
    *,
    tz: str = "UTC",
) -> list[ShiftHourPoint]:
    """Compare ``current`` against ``previous`` hour by hour for one machine."""
    logger.debug("Fetching shift comparison data for machine %s", machine_id)

    current_series, previous_series = await fetch_shift_histories(
        client, machine_id, current, previous
    )
    points = build_comparison(current_series, previous_series, tz=tz)

    logger.info("Built shift comparison for machine %s: %d hours", machine_id, len(points))
    return points


def build_comparison(
    current_series: Iterable[MetricSeriesResponse],
    previous_series: Iterable[MetricSeriesResponse],
    *,
    tz: str = "UTC",
) -> list[ShiftHourPoint]:
    """Turn two already-fetched histories into comparison records.

    Pure with respect to its inputs: the same series always give the same records.
    """
    return merge_shift_buckets(
        _hourly(current_series, tz, "current"),
        _hourly(previous_series, tz, "previous"),
        tz,
    )


def _hourly(series: Iterable[MetricSeriesResponse], tz: str, shift: str) -> dict[str, HourBucket]:
    resolved = resolve_modes(series)
    if resolved.unrecognized:
        logger.debug("Ignoring unrecognized %s shift modes: %s", shift, resolved.unrecognized)
    return aggregate_hourly(resolved.points, tz)
