"""
Shipment row store: single-table persistence over SQLAlchemy.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from sqlalchemy import func, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from freight_dash.db.database import Base, make_engine, make_session_factory
from freight_dash.errors import MissingRequiredField, StorageError
from freight_dash.models import REQUIRED_FIELDS, Shipment

logger = logging.getLogger(__name__)

# the DBAPI raises plain Python errors for values it cannot bind
INSERT_ERRORS = (SQLAlchemyError, OverflowError, ValueError, TypeError)

NUMERIC_COLUMNS = {
    "invoice_value", "volume_count", "real_weight", "cubic_weight",
    "freight_weight_cost", "insurance_value", "total_freight",
}

# search() filter name -> match kind
SEARCH_FILTERS = {
    "date": "exact",
    "origin_state": "exact",
    "destination_state": "exact",
    "origin_city": "contains",
    "destination_city": "contains",
    "invoice_number": "contains",
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_required_fields(record: Mapping[str, Any]) -> List[str]:
    return [name for name in REQUIRED_FIELDS if _is_blank(record.get(name))]


class ShipmentStore:
    """
    Persistent store for shipment records.

    The connection lifecycle is explicit: call connect()/close(), or use the
    store as a context manager for scoped access.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> "ShipmentStore":
        if self._engine is None:
            try:
                self._engine = make_engine(self.database_url, echo=self.echo)
            except (SQLAlchemyError, OSError) as e:
                raise StorageError(f"Could not open database {self.database_url}: {e}") from e
            self._session_factory = make_session_factory(self._engine)
            logger.info("Opened shipment store at %s", self.database_url)
        return self

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Closed shipment store at %s", self.database_url)
        self._engine = None
        self._session_factory = None

    def __enter__(self) -> "ShipmentStore":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise StorageError("Shipment store is not connected")
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def initialize_schema(self) -> None:
        """Create the shipments table if it does not exist."""
        if self._engine is None:
            raise StorageError("Shipment store is not connected")
        try:
            Base.metadata.create_all(bind=self._engine, tables=[Shipment.__table__])
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create schema: {e}") from e

    def _build(self, record: Mapping[str, Any]) -> Shipment:
        values: Dict[str, Any] = {}
        for column in Shipment.__table__.columns:
            name = column.name
            if name == "id":
                continue
            value = record.get(name)
            if name in NUMERIC_COLUMNS:
                values[name] = 0 if value is None else value
            elif isinstance(value, (date, datetime)):
                values[name] = value.strftime("%Y-%m-%d")
            else:
                values[name] = "" if value is None else str(value).strip()
        return Shipment(**values)

    def _insert(self, db: Session, record: Mapping[str, Any]) -> Shipment:
        shipment = self._build(record)
        db.add(shipment)
        db.flush()
        return shipment

    def insert_one(self, record: Mapping[str, Any]) -> int:
        """Insert one record and return its new id."""
        missing = missing_required_fields(record)
        if missing:
            raise MissingRequiredField(missing)

        with self.session() as db:
            try:
                shipment = self._insert(db, record)
                new_id = shipment.id
                db.commit()
            except INSERT_ERRORS as e:
                db.rollback()
                raise StorageError(f"Insert failed: {e}") from e
        return new_id

    def insert_batch(self, records: Iterable[Mapping[str, Any]]) -> int:
        """
        Insert records in a single transaction.

        Records missing required fields are skipped. Any storage error rolls
        back the whole batch and raises StorageError.
        """
        inserted = 0
        with self.session() as db:
            try:
                for idx, record in enumerate(records):
                    missing = missing_required_fields(record)
                    if missing:
                        logger.warning("Skipping batch record %d, missing %s", idx, missing)
                        continue
                    self._insert(db, record)
                    inserted += 1
                db.commit()
            except INSERT_ERRORS as e:
                db.rollback()
                logger.error("Batch insert rolled back after %d rows: %s", inserted, e)
                raise StorageError(f"Batch insert failed, rolled back: {e}") from e
        logger.info("Batch inserted %d shipments", inserted)
        return inserted

    def get_all(self) -> List[Dict[str, Any]]:
        with self.session() as db:
            try:
                shipments = db.query(Shipment).order_by(Shipment.id).all()
            except SQLAlchemyError as e:
                raise StorageError(f"Could not read shipments: {e}") from e
            return [s.to_dict() for s in shipments]

    def search(self, **filters: Optional[str]) -> List[Dict[str, Any]]:
        """
        Filtered scan. Exact match on date/state fields, substring match on
        city and invoice number fields. Empty filters are ignored.
        """
        unknown = set(filters) - set(SEARCH_FILTERS)
        if unknown:
            raise ValueError(f"Unknown search filters: {', '.join(sorted(unknown))}")

        with self.session() as db:
            query = db.query(Shipment)
            for name, value in filters.items():
                if _is_blank(value):
                    continue
                column = getattr(Shipment, name)
                if SEARCH_FILTERS[name] == "exact":
                    query = query.filter(column == value)
                else:
                    query = query.filter(column.contains(value, autoescape=True))
            try:
                shipments = query.order_by(Shipment.id).all()
            except SQLAlchemyError as e:
                raise StorageError(f"Search failed: {e}") from e
            logger.info("Search %s matched %d shipments", filters, len(shipments))
            return [s.to_dict() for s in shipments]

    def count(self) -> int:
        with self.session() as db:
            return db.query(func.count(Shipment.id)).scalar() or 0

    def describe_schema(self) -> Dict[str, Any]:
        """Report whether the shipments table exists and its columns."""
        if self._engine is None:
            raise StorageError("Shipment store is not connected")
        inspector = inspect(self._engine)
        table = Shipment.__tablename__
        if not inspector.has_table(table):
            return {"table_exists": False, "columns": []}
        pk_columns = set(inspector.get_pk_constraint(table).get("constrained_columns") or [])
        columns = [
            {
                "name": col["name"],
                "type": str(col["type"]),
                "nullable": bool(col.get("nullable", True)),
                "primary_key": col["name"] in pk_columns,
            }
            for col in inspector.get_columns(table)
        ]
        return {"table_exists": True, "table": table, "columns": columns}
