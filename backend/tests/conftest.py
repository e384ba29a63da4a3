"""
Shared fixtures for the freight dashboard test suite.
"""
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from freight_dash.config.alias_loader import load_alias_table
from freight_dash.db.database import Settings
from freight_dash.main import create_app
from freight_dash.services.store import ShipmentStore

HEADERS = [
    "Data", "Cidade Origem", "UF Origem", "Base Origem", "NF", "Valor da Nota",
    "Volumes", "Peso", "Peso Cubado", "Cidade Destino", "UF Destino", "Base",
    "Setor", "Frete Peso", "Seguro", "Total Frete",
]


def make_record(**overrides):
    record = {
        "date": "2024-03-04",
        "origin_city": "São Paulo",
        "origin_state": "SP",
        "origin_base": "SAO",
        "invoice_number": "1001",
        "invoice_value": 1500.5,
        "volume_count": 3,
        "real_weight": 120.0,
        "cubic_weight": 140.25,
        "destination_city": "Campinas",
        "destination_state": "SP",
        "destination_base": "CPQ",
        "sector": "R01",
        "freight_weight_cost": 80.0,
        "insurance_value": 4.5,
        "total_freight": 84.5,
    }
    record.update(overrides)
    return record


def make_sheet_row(**overrides):
    row = {
        "Data": "04/03/2024",
        "Cidade Origem": "São Paulo",
        "UF Origem": "SP",
        "Base Origem": "SAO",
        "NF": "1001",
        "Valor da Nota": "1.500,50",
        "Volumes": "3",
        "Peso": "120,0",
        "Peso Cubado": "140,25",
        "Cidade Destino": "Campinas",
        "UF Destino": "SP",
        "Base": "CPQ",
        "Setor": "R01",
        "Frete Peso": "80,00",
        "Seguro": "4,50",
        "Total Frete": "84,50",
    }
    row.update(overrides)
    return row


@pytest.fixture
def alias_table():
    return load_alias_table()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'shipments.db'}"


@pytest.fixture
def store(database_url):
    with ShipmentStore(database_url) as shipment_store:
        shipment_store.initialize_schema()
        yield shipment_store


@pytest.fixture
def xlsx_file(tmp_path):
    """Write rows (list of dicts) to an .xlsx file and return its path."""
    def _write(rows, name="shipments.xlsx", columns=None):
        path = Path(tmp_path) / name
        df = pd.DataFrame(rows, columns=columns)
        df.to_excel(path, index=False, engine="openpyxl")
        return path
    return _write


@pytest.fixture
def sample_sheet_rows():
    return [
        make_sheet_row(NF="1001", Data=datetime(2024, 3, 4)),
        make_sheet_row(NF="1002", Data=datetime(2024, 3, 5), **{"Cidade Destino": "Santos"}),
        make_sheet_row(NF="1003", Data=datetime(2024, 3, 6), **{"UF Origem": "RJ", "Cidade Origem": "Rio de Janeiro"}),
    ]


@pytest.fixture
def settings(tmp_path, database_url):
    return Settings(
        database_url=database_url,
        upload_dir=str(tmp_path / "uploads"),
        filter_debounce_ms=10,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sheet_row_factory():
    return make_sheet_row
