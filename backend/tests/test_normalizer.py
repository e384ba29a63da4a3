"""
Tests for cell value normalization.
"""
from datetime import date, datetime
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest

from freight_dash.services.field_mapper import map_headers
from freight_dash.services.normalizer import (
    coerce_date,
    is_missing,
    normalize_date,
    normalize_decimal,
    normalize_integer,
    normalize_row,
    normalize_text,
    normalize_value,
)


class TestMissing:
    @pytest.mark.parametrize("value", [None, "", "   ", float("nan"), pd.NaT, np.nan])
    def test_missing_values(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value", [0, "0", "abc", date(2024, 1, 1)])
    def test_present_values(self, value):
        assert not is_missing(value)


class TestDecimal:
    def test_comma_decimal_with_thousands(self):
        assert normalize_decimal("1.234,56") == (1234.56, None)

    def test_currency_symbol(self):
        assert normalize_decimal("R$ 10,5") == (10.5, None)

    def test_numbers_are_kept(self):
        assert normalize_decimal(12.75) == (12.75, None)
        assert normalize_decimal(3) == (3.0, None)

    def test_period_thousands_without_comma(self):
        assert normalize_decimal("1.234.567") == (1234567.0, None)

    def test_plain_period_decimal(self):
        assert normalize_decimal("99.9") == (99.9, None)

    def test_negative_in_parentheses(self):
        assert normalize_decimal("(123,45)") == (-123.45, None)

    def test_unparseable_defaults_to_zero_with_warning(self):
        value, warning = normalize_decimal("n/a")

        assert value == 0
        assert "n/a" in warning

    def test_missing_defaults_to_zero_silently(self):
        assert normalize_decimal(None) == (0.0, None)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), 10 ** 400])
    def test_non_finite_defaults_to_zero_with_warning(self, value):
        result, warning = normalize_decimal(value)

        assert result == 0.0
        assert warning

    def test_huge_string_defaults_to_zero_with_warning(self):
        result, warning = normalize_decimal("9" * 400)

        assert result == 0.0
        assert warning


class TestInteger:
    def test_strips_non_digits(self):
        assert normalize_integer("12 vol") == (12, None)

    def test_float_is_truncated(self):
        assert normalize_integer(3.0) == (3, None)

    def test_unparseable_defaults_to_zero_with_warning(self):
        value, warning = normalize_integer("many")

        assert value == 0
        assert warning

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), Decimal("Infinity")])
    def test_non_finite_defaults_to_zero_with_warning(self, value):
        result, warning = normalize_integer(value)

        assert result == 0
        assert warning

    @pytest.mark.parametrize("value", ["99999999999999999999", 2 ** 63, -(2 ** 63) - 1])
    def test_beyond_64_bits_defaults_to_zero_with_warning(self, value):
        result, warning = normalize_integer(value)

        assert result == 0
        assert "out of range" in warning

    def test_largest_64_bit_value_is_kept(self):
        assert normalize_integer(2 ** 63 - 1) == (2 ** 63 - 1, None)


class TestDate:
    def test_brazilian_format(self):
        assert normalize_date("25/12/2023") == ("2023-12-25", None)

    def test_iso_format(self):
        assert normalize_date("2023-12-25") == ("2023-12-25", None)

    def test_iso_with_time_is_reduced_to_date(self):
        assert normalize_date("2023-12-25 18:45:00") == ("2023-12-25", None)

    def test_datetime_is_reduced_to_date(self):
        assert normalize_date(datetime(2023, 12, 25, 23, 59)) == ("2023-12-25", None)

    def test_timestamp(self):
        assert normalize_date(pd.Timestamp("2023-12-25 10:00")) == ("2023-12-25", None)

    def test_two_digit_year(self):
        assert normalize_date("25/12/23") == ("2023-12-25", None)

    def test_excel_serial_number(self):
        assert coerce_date(45285) == date(2023, 12, 25)

    def test_generic_parse(self):
        assert coerce_date("Dec 25 2023") == date(2023, 12, 25)

    def test_invalid_calendar_date_is_not_parsed(self):
        assert coerce_date("31/02/2023") is None

    def test_unparseable_falls_back_to_today_with_warning(self):
        value, warning = normalize_date("not a date", today=date(2024, 1, 2))

        assert value == "2024-01-02"
        assert "not a date" in warning

    def test_missing_date_is_empty(self):
        assert normalize_date(None) == ("", None)


class TestText:
    def test_strips_whitespace(self):
        assert normalize_text("  Campinas ") == ("Campinas", None)

    def test_integral_float_has_no_decimal_part(self):
        assert normalize_text(12345.0) == ("12345", None)

    def test_missing_is_empty_string(self):
        assert normalize_text(None) == ("", None)


class TestNormalizeValue:
    def test_dispatches_by_type(self):
        assert normalize_value("decimal", "2,5") == (2.5, None)
        assert normalize_value("integer", "7") == (7, None)

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            normalize_value("boolean", "x")


class TestNormalizeRow:
    def test_row_with_all_fields(self, alias_table, sheet_row_factory):
        row = sheet_row_factory()
        mapping = map_headers(row.keys(), alias_table)

        record, warnings = normalize_row(row, mapping, alias_table)

        assert warnings == []
        assert record["date"] == "2024-03-04"
        assert record["invoice_value"] == 1500.5
        assert record["volume_count"] == 3
        assert record["real_weight"] == 120.0
        assert record["total_freight"] == 84.5
        assert record["destination_city"] == "Campinas"

    def test_unmapped_fields_get_defaults(self, alias_table):
        row = {"Data": "01/02/2024", "Cidade Origem": "Recife", "UF Origem": "PE", "Base Origem": "REC", "NF": "9"}
        mapping = map_headers(row.keys(), alias_table)

        record, _ = normalize_row(row, mapping, alias_table)

        assert record["total_freight"] == 0.0
        assert record["volume_count"] == 0
        assert record["sector"] == ""

    def test_warnings_name_the_field(self, alias_table, sheet_row_factory):
        row = sheet_row_factory(**{"Total Frete": "???"})
        mapping = map_headers(row.keys(), alias_table)

        record, warnings = normalize_row(row, mapping, alias_table)

        assert record["total_freight"] == 0.0
        assert [field for field, _ in warnings] == ["total_freight"]
