"""Metric identification for history responses.

Each upstream response carries a mode ``Key`` (e.g. "GoodParts"). Keys are
matched case-insensitively against the three tracked metrics; anything else
resolves to UnrecognizedMetric so the caller decides whether to log it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from shift_compare.models import COMPARISON_METRICS, ProductionMetric, RawPoint

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shift_compare.models import MetricSeriesResponse


class UnrecognizedMetric(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str


class ResolvedModes(BaseModel):
    """Raw points grouped by metric, in arrival order, plus the keys that matched nothing."""

    points: dict[ProductionMetric, list[RawPoint]]
    unrecognized: list[str] = []


_BY_NAME: dict[str, ProductionMetric] = {m.value: m for m in ProductionMetric}


def resolve_metric(key: str) -> ProductionMetric | UnrecognizedMetric:
    return _BY_NAME.get(key.strip().lower()) or UnrecognizedMetric(key=key)


def resolve_modes(series: Iterable[MetricSeriesResponse]) -> ResolvedModes:
    """Group every response's points under the metric its key names.

    Duplicate responses for one metric are concatenated in arrival order.
    """
    points: dict[ProductionMetric, list[RawPoint]] = {m: [] for m in COMPARISON_METRICS}
    unrecognized: list[str] = []

    for response in series:
        metric = resolve_metric(response.key)
        if isinstance(metric, UnrecognizedMetric):
            unrecognized.append(metric.key)
            continue
        points[metric].extend(response.history)

    return ResolvedModes(points=points, unrecognized=unrecognized)
