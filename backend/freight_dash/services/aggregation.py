"""
Aggregations over a filtered set of shipment rows: dimension breakdowns,
totals and per-period averages.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

import numpy as np

from freight_dash.services.filter_engine import DIMENSIONS, DateRange, dimension_value
from freight_dash.services.normalizer import coerce_date

# metric name -> record field summed for it
SUMMED_METRICS = {
    "weight": "real_weight",
    "volumes": "volume_count",
    "invoice_value": "invoice_value",
    "freight": "total_freight",
}


@dataclass
class MetricSummary:
    total: float = 0.0
    per_business_day: float = 0.0
    per_shipment_day: float = 0.0
    per_shipment: float = 0.0


@dataclass
class Totals:
    shipments: int = 0
    weight: float = 0.0
    volumes: int = 0
    invoice_value: float = 0.0
    freight: float = 0.0
    business_days: Optional[int] = None
    shipment_days: Optional[int] = None
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    averages: Dict[str, MetricSummary] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def count_by_dimension(rows: Iterable[Mapping[str, Any]], dimension: str) -> List[Dict[str, Any]]:
    """Row counts per dimension value, largest first."""
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown dimension '{dimension}'")
    counts = Counter(dimension_value(row, dimension) for row in rows)
    return [{"value": value, "count": count} for value, count in counts.most_common()]


def breakdowns(rows: Sequence[Mapping[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    return {dimension: count_by_dimension(rows, dimension) for dimension in DIMENSIONS}


def count_business_days(start: date, end: date) -> int:
    """Weekdays (Mon-Fri) between start and end inclusive, at least 1."""
    if end < start:
        return 1
    days = int(np.busday_count(np.datetime64(start, "D"), np.datetime64(end + timedelta(days=1), "D")))
    return max(days, 1)


def _row_dates(rows: Iterable[Mapping[str, Any]]) -> Set[date]:
    cache: Dict[str, Optional[date]] = {}
    dates: Set[date] = set()
    for row in rows:
        raw = row.get("date")
        key = str(raw)
        if key not in cache:
            cache[key] = coerce_date(raw)
        if cache[key] is not None:
            dates.add(cache[key])
    return dates


def count_shipment_days(rows: Iterable[Mapping[str, Any]]) -> int:
    """Distinct calendar dates present in the rows, at least 1."""
    return max(len(_row_dates(rows)), 1)


def _number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def compute_totals(
    rows: Sequence[Mapping[str, Any]],
    date_range: Optional[DateRange] = None,
) -> Totals:
    """
    Totals and averages for the rows.

    Per-day averages are only divided when a date range is active; without
    one they equal the totals. Per-shipment averages are always divided.
    """
    totals = Totals()
    if not rows:
        # the range alone still fixes the business-day count
        if date_range is not None and date_range.start and date_range.end:
            totals.business_days = count_business_days(date_range.start, date_range.end)
        return totals

    totals.shipments = len(rows)
    sums = {
        metric: sum(_number(row.get(field_name)) for row in rows)
        for metric, field_name in SUMMED_METRICS.items()
    }
    totals.weight = float(sums["weight"])
    totals.volumes = int(sums["volumes"])
    totals.invoice_value = float(sums["invoice_value"])
    totals.freight = float(sums["freight"])

    dates = _row_dates(rows)
    if dates:
        totals.first_date = min(dates).isoformat()
        totals.last_date = max(dates).isoformat()

    business_days = shipment_days = 1
    if date_range is not None and date_range.is_active and dates:
        start = date_range.start or min(dates)
        end = date_range.end or max(dates)
        business_days = count_business_days(start, end)
        shipment_days = max(len(dates), 1)
        totals.business_days = business_days
        totals.shipment_days = shipment_days

    metric_totals = {"shipments": float(totals.shipments), **{k: float(v) for k, v in sums.items()}}
    for metric, total in metric_totals.items():
        totals.averages[metric] = MetricSummary(
            total=total,
            per_business_day=total / business_days,
            per_shipment_day=total / shipment_days,
            per_shipment=total / max(totals.shipments, 1),
        )
    return totals
