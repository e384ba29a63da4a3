"""
Utilities for loading the spreadsheet column alias configuration.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

CONFIG_PATH = Path(__file__).resolve().parent / "column_aliases.yaml"

FIELD_TYPES = ("string", "decimal", "integer", "date")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str
    required: bool = False
    aliases: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AliasTable:
    """Static header-variant -> canonical field table."""

    fields: Dict[str, FieldSpec]

    @property
    def required_fields(self) -> List[str]:
        return [name for name, spec in self.fields.items() if spec.required]

    def field_type(self, name: str) -> str:
        return self.fields[name].type

    def aliases_for(self, name: str) -> List[str]:
        spec = self.fields.get(name)
        return list(spec.aliases) if spec else []

    def lookup(self) -> Dict[str, str]:
        """Flat alias -> canonical name mapping, in config order."""
        mapping: Dict[str, str] = {}
        for name, spec in self.fields.items():
            for alias in spec.aliases:
                mapping.setdefault(alias, name)
        return mapping


def _parse_config(raw: Dict[str, Any]) -> AliasTable:
    fields: Dict[str, FieldSpec] = {}
    for name, cfg in (raw.get("fields") or {}).items():
        cfg = cfg or {}
        field_type = cfg.get("type", "string")
        if field_type not in FIELD_TYPES:
            raise ValueError(f"Unknown type '{field_type}' for field {name}")
        aliases = tuple(str(a) for a in (cfg.get("aliases") or []))
        fields[name] = FieldSpec(
            name=name,
            type=field_type,
            required=bool(cfg.get("required", False)),
            aliases=aliases,
        )
    return AliasTable(fields=fields)


@lru_cache()
def load_alias_config(path: Optional[str] = None) -> Dict[str, Any]:
    config_path = Path(path) if path else CONFIG_PATH
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def load_alias_table(path: Optional[str] = None) -> AliasTable:
    return _parse_config(load_alias_config(path))
