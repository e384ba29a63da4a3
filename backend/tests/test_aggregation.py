"""
Tests for breakdowns, totals and per-period averages.
"""
from datetime import date

import pytest

from freight_dash.services.aggregation import (
    breakdowns,
    compute_totals,
    count_business_days,
    count_by_dimension,
    count_shipment_days,
)
from freight_dash.services.filter_engine import NOT_INFORMED, DateRange


@pytest.fixture
def rows(record_factory):
    return [
        record_factory(date="2024-03-04", real_weight=100.0, volume_count=2, total_freight=50.0, invoice_value=1000.0),
        record_factory(date="2024-03-04", real_weight=50.0, volume_count=1, total_freight=25.0, invoice_value=500.0),
        record_factory(date="2024-03-06", real_weight=30.0, volume_count=3, total_freight=10.0, invoice_value=0.0),
        record_factory(date="2024-03-09", real_weight=20.0, volume_count=4, total_freight=15.0, invoice_value=0.0, destination_city="Santos"),
        record_factory(date="2024-03-13", real_weight=0.0, volume_count=0, total_freight=0.0, invoice_value=0.0, destination_city=""),
    ]


class TestBreakdowns:
    def test_count_by_dimension_largest_first(self, rows):
        counts = count_by_dimension(rows, "destination_city")

        assert counts[0] == {"value": "Campinas", "count": 3}
        assert {"value": "Santos", "count": 1} in counts
        assert {"value": NOT_INFORMED, "count": 1} in counts

    def test_unknown_dimension(self, rows):
        with pytest.raises(ValueError):
            count_by_dimension(rows, "weight")

    def test_all_dimensions(self, rows):
        result = breakdowns(rows)

        assert set(result) == {
            "branch", "sector", "destination_state", "destination_city",
            "origin_base", "origin_state", "origin_city",
        }
        assert result["branch"] == [{"value": "CPQ", "count": 5}]


class TestDayCounts:
    def test_business_days_exclude_weekends(self):
        assert count_business_days(date(2024, 3, 4), date(2024, 3, 13)) == 8

    def test_weekend_only_range_counts_one(self):
        assert count_business_days(date(2024, 3, 9), date(2024, 3, 10)) == 1

    def test_shipment_days_are_distinct_dates(self, rows):
        assert count_shipment_days(rows) == 4

    def test_shipment_days_minimum(self):
        assert count_shipment_days([]) == 1


class TestTotals:
    def test_sums(self, rows):
        totals = compute_totals(rows)

        assert totals.shipments == 5
        assert totals.weight == pytest.approx(200.0)
        assert totals.volumes == 10
        assert totals.freight == pytest.approx(100.0)
        assert totals.invoice_value == pytest.approx(1500.0)
        assert totals.first_date == "2024-03-04"
        assert totals.last_date == "2024-03-13"

    def test_without_range_per_day_equals_total(self, rows):
        totals = compute_totals(rows)

        assert totals.business_days is None
        assert totals.shipment_days is None
        freight = totals.averages["freight"]
        assert freight.per_business_day == pytest.approx(100.0)
        assert freight.per_shipment_day == pytest.approx(100.0)
        assert freight.per_shipment == pytest.approx(20.0)

    def test_with_range(self, rows):
        totals = compute_totals(rows, DateRange(date(2024, 3, 4), date(2024, 3, 13)))

        assert totals.business_days == 8
        assert totals.shipment_days == 4
        assert totals.averages["freight"].per_business_day == pytest.approx(12.5)
        assert totals.averages["freight"].per_shipment_day == pytest.approx(25.0)
        assert totals.averages["shipments"].per_business_day == pytest.approx(5 / 8)

    def test_open_ended_range_uses_data_bounds(self, rows):
        totals = compute_totals(rows, DateRange(start=date(2024, 3, 4)))

        assert totals.business_days == 8

    def test_empty_rows(self):
        totals = compute_totals([], DateRange(date(2024, 3, 4), date(2024, 3, 13)))

        assert totals.shipments == 0
        assert totals.freight == 0
        assert totals.averages == {}
        assert totals.business_days == 8

    def test_empty_rows_open_ended_range(self):
        totals = compute_totals([], DateRange(start=date(2024, 3, 4)))

        assert totals.business_days is None

    def test_to_dict(self, rows):
        payload = compute_totals(rows).to_dict()

        assert payload["shipments"] == 5
        assert payload["averages"]["weight"]["per_shipment"] == pytest.approx(40.0)
