"""
Tests for spreadsheet header -> canonical field mapping.
"""
from freight_dash.config.alias_loader import load_alias_table
from freight_dash.services.field_mapper import map_headers

from conftest import HEADERS


class TestAliasTable:
    def test_required_fields(self, alias_table):
        assert alias_table.required_fields == [
            "date", "origin_city", "origin_state", "origin_base", "invoice_number",
        ]

    def test_field_types(self, alias_table):
        assert alias_table.field_type("date") == "date"
        assert alias_table.field_type("volume_count") == "integer"
        assert alias_table.field_type("total_freight") == "decimal"
        assert alias_table.field_type("sector") == "string"

    def test_many_aliases_map_to_one_field(self, alias_table):
        lookup = alias_table.lookup()
        assert lookup["Peso"] == "real_weight"
        assert lookup["Peso Real"] == "real_weight"
        assert lookup["Filial"] == "destination_base"

    def test_loader_is_cached(self):
        assert load_alias_table().fields == load_alias_table().fields


class TestMapHeaders:
    def test_full_header_set(self, alias_table):
        mapping = map_headers(HEADERS, alias_table)

        assert mapping.is_complete
        assert mapping.missing_required == []
        assert mapping.matched["invoice_number"] == "NF"
        assert mapping.matched["real_weight"] == "Peso"
        assert mapping.matched["destination_base"] == "Base"
        assert mapping.headers_found == HEADERS

    def test_loose_matching_ignores_case_and_spacing(self, alias_table):
        mapping = map_headers(["data", " cidade  origem ", "UF ORIGEM", "base origem", "nf"], alias_table)

        assert mapping.is_complete
        assert mapping.matched["origin_city"] == " cidade  origem "

    def test_unknown_headers_are_ignored(self, alias_table):
        mapping = map_headers(HEADERS + ["Observação"], alias_table)

        assert "Observação" not in mapping.matched.values()
        assert "Observação" in mapping.headers_found

    def test_first_matching_header_wins(self, alias_table):
        mapping = map_headers(["Peso", "Peso Real"], alias_table)

        assert mapping.matched["real_weight"] == "Peso"

    def test_missing_invoice_number(self, alias_table):
        headers = [h for h in HEADERS if h != "NF"]
        mapping = map_headers(headers, alias_table)

        assert not mapping.is_complete
        assert mapping.missing_required == ["invoice_number"]
        report = mapping.missing_report()
        assert report[0]["field"] == "invoice_number"
        assert "NF" in report[0]["accepted_headers"]
        assert "Nota Fiscal" in report[0]["accepted_headers"]

    def test_fields_used_lists_matched_pairs(self, alias_table):
        mapping = map_headers(["NF", "Data"], alias_table)

        assert {"field": "invoice_number", "header": "NF"} in mapping.fields_used()
        assert {"field": "date", "header": "Data"} in mapping.fields_used()
