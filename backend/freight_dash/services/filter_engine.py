"""
In-memory filtering of shipment rows: a date range plus hierarchical
drill-down filters on categorical dimensions.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from freight_dash.services.normalizer import coerce_date

logger = logging.getLogger(__name__)

NOT_INFORMED = "Não informado"

# dimension name -> record field
DIMENSIONS: Dict[str, str] = {
    "branch": "destination_base",
    "sector": "sector",
    "destination_state": "destination_state",
    "destination_city": "destination_city",
    "origin_base": "origin_base",
    "origin_state": "origin_state",
    "origin_city": "origin_city",
}

DIMENSION_LABELS: Dict[str, str] = {
    "branch": "Filial",
    "sector": "Roteiro",
    "destination_state": "UF",
    "destination_city": "Cidade",
    "origin_base": "Base Origem",
    "origin_state": "UF Origem",
    "origin_city": "Cidade Origem",
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _build_aliases() -> Dict[str, str]:
    aliases: Dict[str, str] = {}
    for dimension, field_name in DIMENSIONS.items():
        for alias in (dimension, _camel(dimension), field_name, _camel(field_name), DIMENSION_LABELS[dimension]):
            aliases.setdefault(alias, dimension)
    return aliases


DIMENSION_ALIASES = _build_aliases()


def resolve_dimension(name: str) -> str:
    try:
        return DIMENSION_ALIASES[name]
    except KeyError:
        raise ValueError(f"Unknown dimension '{name}'. Known: {', '.join(DIMENSIONS)}")


def dimension_value(row: Mapping[str, Any], dimension: str) -> str:
    """Value of a dimension for a row; empty values become NOT_INFORMED."""
    raw = row.get(DIMENSIONS[dimension])
    text = "" if raw is None else str(raw).strip()
    return text or NOT_INFORMED


def to_day(value: Any) -> Optional[date]:
    """Reduce a date-like bound to a calendar day (no time of day)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = coerce_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


class FilterStatus(str, enum.Enum):
    UNFILTERED = "unfiltered"
    DATE_FILTERED = "date_filtered"
    CATEGORY_FILTERED = "category_filtered"


@dataclass(frozen=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, day: date) -> bool:
        key = (day.year, day.month, day.day)
        if self.start is not None and key < (self.start.year, self.start.month, self.start.day):
            return False
        if self.end is not None and key > (self.end.year, self.end.month, self.end.day):
            return False
        return True


@dataclass(frozen=True)
class CategoryFilter:
    dimension: str
    value: str

    def matches(self, row: Mapping[str, Any]) -> bool:
        return dimension_value(row, self.dimension) == self.value


class FilterEngine:
    """
    Filter state over a fixed set of rows.

    The date range is always applied to the full data set. Category filters
    narrow the date-filtered rows further, one filter per dimension; clicking
    an active filter again removes it.
    """

    def __init__(self, rows: Iterable[Mapping[str, Any]] = ()):
        self._all: List[Mapping[str, Any]] = list(rows)
        self._date_range: Optional[DateRange] = None
        self._filters: List[CategoryFilter] = []
        self._date_rows: List[Mapping[str, Any]] = self._all
        self._rows: List[Mapping[str, Any]] = self._all
        self.is_empty_result = False
        self.stale = False

    @property
    def all_rows(self) -> List[Mapping[str, Any]]:
        return self._all

    @property
    def rows(self) -> List[Mapping[str, Any]]:
        return self._rows

    @property
    def date_rows(self) -> List[Mapping[str, Any]]:
        return self._date_rows

    @property
    def date_range(self) -> Optional[DateRange]:
        return self._date_range

    @property
    def active_filters(self) -> Tuple[CategoryFilter, ...]:
        return tuple(self._filters)

    @property
    def status(self) -> FilterStatus:
        if self._filters:
            return FilterStatus.CATEGORY_FILTERED
        if self._date_range is not None:
            return FilterStatus.DATE_FILTERED
        return FilterStatus.UNFILTERED

    def load(self, rows: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        """Replace the data set and re-apply the current filters."""
        self._all = list(rows)
        self._date_rows = self._filter_by_date(self._date_range)
        self._rows = self._apply_filters(self._date_rows)
        self.is_empty_result = bool(self._filters) and not self._rows
        self.stale = False
        return self._rows

    def _filter_by_date(self, date_range: Optional[DateRange]) -> List[Mapping[str, Any]]:
        if date_range is None:
            return self._all
        # parsed dates keyed by raw representation, for this pass only
        cache: Dict[str, Optional[date]] = {}
        result = []
        for row in self._all:
            raw = row.get("date")
            key = str(raw)
            if key not in cache:
                cache[key] = coerce_date(raw)
            day = cache[key]
            if day is not None and date_range.contains(day):
                result.append(row)
        logger.debug(
            "Date filter %s..%s kept %d of %d rows (%d distinct raw dates)",
            date_range.start, date_range.end, len(result), len(self._all), len(cache),
        )
        return result

    def _apply_filters(
        self,
        rows: Sequence[Mapping[str, Any]],
        filters: Optional[Sequence[CategoryFilter]] = None,
    ) -> List[Mapping[str, Any]]:
        result = list(rows)
        for category in self._filters if filters is None else filters:
            result = [row for row in result if category.matches(row)]
        return result

    def set_date_range(self, start: Any = None, end: Any = None) -> List[Mapping[str, Any]]:
        date_range = DateRange(to_day(start), to_day(end))
        if date_range.start and date_range.end and date_range.start > date_range.end:
            raise ValueError(f"Start date {date_range.start} is after end date {date_range.end}")

        self._date_range = date_range if date_range.is_active else None
        self._date_rows = self._filter_by_date(self._date_range)

        if not self._filters:
            self._rows = self._date_rows
            self.is_empty_result = False
            self.stale = False
            return self._rows

        narrowed = self._apply_filters(self._date_rows)
        if narrowed:
            self._rows = narrowed
            self.is_empty_result = False
            self.stale = False
        else:
            # keep the previous view rather than collapsing it to nothing
            logger.warning(
                "Filters %s returned no rows for the new date range; keeping previous result",
                [(f.dimension, f.value) for f in self._filters],
            )
            self.stale = True
        return self._rows

    def clear_date_range(self) -> List[Mapping[str, Any]]:
        return self.set_date_range(None, None)

    def set_category_filter(self, dimension: str, value: Any) -> List[Mapping[str, Any]]:
        dimension = resolve_dimension(dimension)
        text = "" if value is None else str(value).strip()
        selected = CategoryFilter(dimension, text or NOT_INFORMED)

        if selected in self._filters:
            self._filters.remove(selected)
            logger.info("Removed filter %s = %s", dimension, selected.value)
        elif any(f.dimension == dimension for f in self._filters):
            self._filters = [selected if f.dimension == dimension else f for f in self._filters]
            logger.info("Replaced filter on %s with %s", dimension, selected.value)
        else:
            self._filters.append(selected)
            logger.info("Applied filter %s = %s", dimension, selected.value)

        self._rows = self._apply_filters(self._date_rows)
        self.stale = False
        self.is_empty_result = bool(self._filters) and not self._rows
        if self.is_empty_result:
            logger.warning("Filter %s = %s returned no rows", dimension, selected.value)
        return self._rows

    def clear(self) -> List[Mapping[str, Any]]:
        """Drop category filters, keeping the date range if one is set."""
        self._filters = []
        self._rows = self._date_rows
        self.is_empty_result = False
        self.stale = False
        return self._rows
