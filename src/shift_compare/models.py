"""Shift comparison data models - windows, upstream history DTOs, hour buckets, output records."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class ProductionMetric(StrEnum):
    """The three tracked production signals, valued as the upstream mode names."""

    GOOD = "goodparts"
    REJECT = "rejectparts"
    DOWNTIME = "downtime"


COMPARISON_METRICS: tuple[ProductionMetric, ...] = (
    ProductionMetric.GOOD,
    ProductionMetric.REJECT,
    ProductionMetric.DOWNTIME,
)


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------


class ShiftWindow(BaseModel):
    """A bounded shift interval with optional server-side qualifiers."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str
    filter: str | None = None
    dims: tuple[str, ...] | None = None


# ---------------------------------------------------------------------------
# Upstream history payload (PascalCase on the wire)
# ---------------------------------------------------------------------------


class RawPoint(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: str = Field(alias="DateTime")
    value: float = Field(alias="Value", ge=0, allow_inf_nan=False)
    group_by: str | None = Field(default=None, alias="GroupBy")
    group_id: int | None = Field(default=None, alias="GroupId")


class MetricSeriesResponse(BaseModel):
    """One requested metric's history for one window."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(alias="Key")
    history: list[RawPoint] = Field(default_factory=list, alias="History")
    id: int | None = Field(default=None, alias="Id")
    short_name: str | None = Field(default=None, alias="ShortName")
    item_owner: str | None = Field(default=None, alias="ItemOwner")
    item_owner_id: int | None = Field(default=None, alias="ItemOwnerId")
    time_base: str | None = Field(default=None, alias="TimeBase")
    description: str | None = Field(default=None, alias="Description")
    interval_start: str | None = Field(default=None, alias="IntervalStart")
    interval_end: str | None = Field(default=None, alias="IntervalEnd")


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

_BUCKET_FIELDS: dict[ProductionMetric, str] = {
    ProductionMetric.GOOD: "good_parts",
    ProductionMetric.REJECT: "reject_parts",
    ProductionMetric.DOWNTIME: "downtime_minutes",
}


class HourBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    good_parts: float = 0
    reject_parts: float = 0
    downtime_minutes: float = 0

    def with_value(self, metric: ProductionMetric, value: float) -> HourBucket:
        """Return a copy with ``metric`` set to ``value`` (assignment, not accumulation)."""
        return self.model_copy(update={_BUCKET_FIELDS[metric]: value})


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class ShiftHourPoint(BaseModel):
    """One hour of the comparison: current and previous shift side by side."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    hour_label: str
    hour_index: int
    current_good: float = 0
    current_reject: float = 0
    current_downtime: float = 0
    previous_good: float = 0
    previous_reject: float = 0
    previous_downtime: float = 0


class ShiftComparisonResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    machine_id: int
    timezone: str
    current_shift: ShiftWindow
    previous_shift: ShiftWindow
    hours: list[ShiftHourPoint]
