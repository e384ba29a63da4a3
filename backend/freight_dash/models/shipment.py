"""
Shipment model - one flat freight record per imported spreadsheet row.
"""
from sqlalchemy import Column, Float, Integer, String
from freight_dash.db.database import Base

REQUIRED_FIELDS = ("date", "origin_city", "origin_state", "origin_base", "invoice_number")


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Required fields
    date = Column(String, nullable=False)  # ISO YYYY-MM-DD
    origin_city = Column(String, nullable=False)
    origin_state = Column(String, nullable=False)  # UF
    origin_base = Column(String, nullable=False)
    invoice_number = Column(String, nullable=False)  # NF, not unique

    invoice_value = Column(Float, nullable=False, default=0)
    volume_count = Column(Integer, nullable=False, default=0)
    real_weight = Column(Float, nullable=False, default=0)
    cubic_weight = Column(Float, nullable=False, default=0)
    destination_city = Column(String, nullable=False, default="")
    destination_state = Column(String, nullable=False, default="")
    destination_base = Column(String, nullable=False, default="")  # branch (filial)
    sector = Column(String, nullable=False, default="")  # route (roteiro)
    freight_weight_cost = Column(Float, nullable=False, default=0)
    insurance_value = Column(Float, nullable=False, default=0)
    total_freight = Column(Float, nullable=False, default=0)

    def to_dict(self):
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
