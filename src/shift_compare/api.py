"""FastAPI router for shift comparison.

Endpoints:
  GET /machines/{id}/shift-comparison - current vs previous shift, hour by hour

When a shift's bounds are omitted, the default day shift (today vs yesterday
in the configured time zone) is used for it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, HTTPException, Query
from whenever import Instant

from shift_compare.config import ensure_time_zone
from shift_compare.errors import ShiftComparisonError
from shift_compare.models import ShiftComparisonResponse
from shift_compare.service import compare_shifts
from shift_compare.shifts import resolve_shift_windows

if TYPE_CHECKING:
    from shift_compare.client import HistoryClient

logger = logging.getLogger("shift_compare.api")

router = APIRouter(prefix="/machines", tags=["shift-comparison"])

# These are set at mount time via `configure_comparison_router`
_client: HistoryClient | None = None
_timezone: str = "UTC"
_shift_hours: tuple[int, int] = (6, 18)


def configure_comparison_router(
    *,
    client: HistoryClient,
    timezone: str = "UTC",
    shift_start_hour: int = 6,
    shift_end_hour: int = 18,
) -> None:
    """Inject dependencies into the comparison router.

    Called by the hosting app during startup before mounting the router.
    Raises ValueError for an unknown time zone or an empty default shift.
    """
    ensure_time_zone(timezone)
    if not 0 <= shift_start_hour < shift_end_hour <= 24:
        raise ValueError(
            f"Invalid shift hours {shift_start_hour}-{shift_end_hour}: need 0 <= start < end <= 24"
        )
    global _client, _timezone, _shift_hours
    _client = client
    _timezone = timezone
    _shift_hours = (shift_start_hour, shift_end_hour)


def _get_client() -> HistoryClient:
    if _client is None:
        raise HTTPException(status_code=503, detail="Production history client not configured")
    return _client


@router.get("/{machine_id}/shift-comparison")
async def get_shift_comparison(
    machine_id: int,
    current_start: str | None = None,
    current_end: str | None = None,
    previous_start: str | None = None,
    previous_end: str | None = None,
    current_filter: str | None = None,
    previous_filter: str | None = None,
    dims: Annotated[list[str] | None, Query()] = None,
) -> ShiftComparisonResponse:
    """Compare the current shift with the previous one for a machine."""
    client = _get_client()

    start_hour, end_hour = _shift_hours
    try:
        current, previous = resolve_shift_windows(
            Instant.now(),
            _timezone,
            current_start=current_start,
            current_end=current_end,
            previous_start=previous_start,
            previous_end=previous_end,
            current_filter=current_filter,
            previous_filter=previous_filter,
            dims=dims,
            start_hour=start_hour,
            end_hour=end_hour,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        hours = await compare_shifts(client, machine_id, current, previous, tz=_timezone)
    except ShiftComparisonError as exc:
        logger.warning("Shift comparison failed for machine %s: %s", machine_id, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return ShiftComparisonResponse(
        machine_id=machine_id,
        timezone=_timezone,
        current_shift=current,
        previous_shift=previous,
        hours=hours,
    )
