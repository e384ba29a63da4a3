"""
Column mapping: spreadsheet headers -> canonical shipment fields.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from freight_dash.config.alias_loader import AliasTable, load_alias_table

logger = logging.getLogger(__name__)


def _header_key(header) -> str:
    """Collapse whitespace and case so 'Peso  real ' matches 'Peso Real'."""
    return " ".join(str(header).split()).casefold()


@dataclass
class FieldMapping:
    """Result of matching one file's headers against the alias table."""

    matched: Dict[str, str] = field(default_factory=dict)  # canonical -> header
    missing_required: List[str] = field(default_factory=list)
    headers_found: List[str] = field(default_factory=list)
    alias_table: Optional[AliasTable] = None

    @property
    def is_complete(self) -> bool:
        return not self.missing_required

    def accepted_headers(self, canonical: str) -> List[str]:
        if self.alias_table is None:
            return []
        return self.alias_table.aliases_for(canonical)

    def fields_used(self) -> List[Dict[str, str]]:
        return [{"field": name, "header": header} for name, header in self.matched.items()]

    def missing_report(self) -> List[Dict[str, object]]:
        return [
            {"field": name, "accepted_headers": self.accepted_headers(name)}
            for name in self.missing_required
        ]


def map_headers(headers: Iterable, alias_table: Optional[AliasTable] = None) -> FieldMapping:
    """
    Match headers to canonical field names.

    Exact header text wins; otherwise headers are compared trimmed and
    case-insensitively. When several headers resolve to the same field the
    first one in file order is used.
    """
    alias_table = alias_table or load_alias_table()
    exact = alias_table.lookup()
    loose = {}
    for alias, canonical in exact.items():
        loose.setdefault(_header_key(alias), canonical)

    headers_found = [str(h) for h in headers]
    matched: Dict[str, str] = {}

    for header in headers_found:
        canonical = exact.get(header) or loose.get(_header_key(header))
        if not canonical:
            continue
        if canonical in matched:
            logger.debug(
                "Header '%s' also maps to %s; keeping '%s'",
                header, canonical, matched[canonical],
            )
            continue
        matched[canonical] = header

    missing = [name for name in alias_table.required_fields if name not in matched]
    if missing:
        logger.warning("Missing required columns: %s (headers: %s)", missing, headers_found)

    return FieldMapping(
        matched=matched,
        missing_required=missing,
        headers_found=headers_found,
        alias_table=alias_table,
    )
