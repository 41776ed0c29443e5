"""Query parameters for the production history endpoint.

The upstream API expects list parameters in indexed form (``modes[0]``,
``modes[1]``, ...), so lists are flattened here rather than left to httpx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shift_compare.models import ShiftWindow


def build_query_params(
    window: ShiftWindow,
    metrics: Iterable[str],
    *,
    date_type: str = "calendar",
    interval_base: str = "hour",
    time_base: str = "hour",
    group_by: str = "",
) -> dict[str, str]:
    """Build the parameter set for one history query over ``window``.

    Window bounds are passed through as given; an inverted window is not rejected.
    """
    params: dict[str, str] = {
        "start": window.start,
        "end": window.end,
        "dateType": date_type,
        "intervalBase": interval_base,
        "timeBase": time_base,
        "groupBy": group_by,
    }
    params.update(_indexed("modes", metrics))
    if window.dims:
        params.update(_indexed("dims", window.dims))
    if window.filter:
        params["filter"] = window.filter
    return params


def _indexed(name: str, values: Iterable[str]) -> dict[str, str]:
    return {f"{name}[{i}]": str(v) for i, v in enumerate(values)}
