"""
Request dependencies shared by the API routers.
"""
from fastapi import Request

from freight_dash.db.database import Settings
from freight_dash.services.store import ShipmentStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ShipmentStore:
    """The application-lifetime store opened in the lifespan handler."""
    return request.app.state.store
