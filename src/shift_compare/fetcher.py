"""Concurrent fetch of the current and previous shift histories."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from shift_compare.errors import HistoryFetchError, ShiftComparisonError
from shift_compare.models import COMPARISON_METRICS
from shift_compare.query import build_query_params

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shift_compare.client import HistoryClient
    from shift_compare.models import MetricSeriesResponse, ProductionMetric, ShiftWindow


async def fetch_shift_histories(
    client: HistoryClient,
    machine_id: int,
    current: ShiftWindow,
    previous: ShiftWindow,
    *,
    metrics: Sequence[ProductionMetric] = COMPARISON_METRICS,
) -> tuple[list[MetricSeriesResponse], list[MetricSeriesResponse]]:
    """Query both shift windows concurrently and return ``(current, previous)``.

    Both-or-neither: if either query fails the other is cancelled and the first
    failure is raised as a single HistoryFetchError.
    """
    current_params = build_query_params(current, metrics)
    previous_params = build_query_params(previous, metrics)

    try:
        async with asyncio.TaskGroup() as tg:
            current_task = tg.create_task(
                client.get_production_history(machine_id, current_params)
            )
            previous_task = tg.create_task(
                client.get_production_history(machine_id, previous_params)
            )
    except ExceptionGroup as eg:
        first = eg.exceptions[0]
        if isinstance(first, ShiftComparisonError):
            raise first from first.__cause__
        raise HistoryFetchError(f"Production history request failed: {first}") from first

    return current_task.result(), previous_task.result()
