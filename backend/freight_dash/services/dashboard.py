"""
Interactive dashboard session: filter events in, filtered rows and
aggregations out, with debounced recomputation.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from freight_dash.services.aggregation import Totals, breakdowns, compute_totals
from freight_dash.services.debounce import Debouncer
from freight_dash.services.filter_engine import FilterEngine, FilterStatus, to_day

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class DashboardView:
    status: FilterStatus
    is_empty_result: bool
    stale: bool
    date_range: Optional[Dict[str, Optional[str]]]
    active_filters: List[Dict[str, str]]
    total_rows: int
    rows: List[Mapping[str, Any]] = field(default_factory=list)
    breakdowns: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    totals: Totals = field(default_factory=Totals)

    @property
    def filtered_rows(self) -> int:
        return len(self.rows)

    def to_dict(self, include_rows: bool = False) -> Dict[str, Any]:
        payload = {
            "status": self.status.value,
            "is_empty_result": self.is_empty_result,
            "stale": self.stale,
            "date_range": self.date_range,
            "active_filters": self.active_filters,
            "total_rows": self.total_rows,
            "filtered_rows": self.filtered_rows,
            "breakdowns": self.breakdowns,
            "totals": self.totals.to_dict(),
        }
        if include_rows:
            payload["rows"] = [dict(row) for row in self.rows]
        return payload


class DashboardSession:
    """
    Holds one user's filter state over a data set.

    Filter events update state right away; the (comparatively expensive)
    date pass and aggregations run once per quiet period. Without a running
    event loop every event recomputes synchronously.
    """

    def __init__(
        self,
        rows: Iterable[Mapping[str, Any]] = (),
        debounce_delay: float = 0.3,
        on_update: Optional[Callable[[DashboardView], Any]] = None,
    ):
        self.engine = FilterEngine(rows)
        self.on_update = on_update
        self.recomputations = 0
        self._pending_range: Any = _UNSET
        self._debouncer = Debouncer(self._recompute, delay=debounce_delay)
        self.view = self._build_view()

    def _apply_pending(self) -> None:
        if self._pending_range is not _UNSET:
            start, end = self._pending_range
            self._pending_range = _UNSET
            self.engine.set_date_range(start, end)

    def _build_view(self) -> DashboardView:
        engine = self.engine
        date_range = None
        if engine.date_range is not None:
            date_range = {
                "start": engine.date_range.start.isoformat() if engine.date_range.start else None,
                "end": engine.date_range.end.isoformat() if engine.date_range.end else None,
            }
        rows = engine.rows
        return DashboardView(
            status=engine.status,
            is_empty_result=engine.is_empty_result,
            stale=engine.stale,
            date_range=date_range,
            active_filters=[{"dimension": f.dimension, "value": f.value} for f in engine.active_filters],
            total_rows=len(engine.all_rows),
            rows=rows,
            breakdowns=breakdowns(rows),
            totals=compute_totals(rows, engine.date_range),
        )

    def _recompute(self) -> DashboardView:
        self._apply_pending()
        self.view = self._build_view()
        self.recomputations += 1
        logger.debug(
            "Recomputed dashboard: %d of %d rows (%s)",
            self.view.filtered_rows, self.view.total_rows, self.view.status.value,
        )
        if self.on_update is not None:
            self.on_update(self.view)
        return self.view

    def _schedule(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._recompute()
            return
        self._debouncer.trigger()

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def load(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self._apply_pending()
        self.engine.load(rows)
        self._schedule()

    def set_date_range(self, start: Any = None, end: Any = None) -> None:
        # validated now so bad input fails at the call site
        start_day, end_day = to_day(start), to_day(end)
        if start_day and end_day and start_day > end_day:
            raise ValueError(f"Start date {start_day} is after end date {end_day}")
        self._pending_range = (start_day, end_day)
        self._schedule()

    def set_category_filter(self, dimension: str, value: Any) -> None:
        self._apply_pending()
        self.engine.set_category_filter(dimension, value)
        self._schedule()

    def clear(self) -> None:
        self._apply_pending()
        self.engine.clear()
        self._schedule()

    async def refresh(self) -> DashboardView:
        """Recompute immediately, superseding any pending run."""
        return await self._debouncer.flush()

    async def settled(self) -> DashboardView:
        """Wait for the pending recomputation, if any."""
        await self._debouncer.wait()
        return self.view
