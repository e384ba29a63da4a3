"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from freight_dash.api import dashboard, shipments, uploads
from freight_dash.db.database import Settings, settings as default_settings
from freight_dash.services.store import ShipmentStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Interactive queries share one store for the process lifetime
        store = ShipmentStore(settings.database_url, echo=settings.sql_echo)
        store.connect()
        store.initialize_schema()
        app.state.store = store
        logger.info("Freight dashboard API started (database: %s)", settings.database_url)
        try:
            yield
        finally:
            store.close()

    app = FastAPI(
        title="Freight BI Dashboard",
        description="Shipment spreadsheet import and freight analytics",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,  # front-end dev servers
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(uploads.router, prefix="/api/uploads", tags=["uploads"])
    app.include_router(shipments.router, prefix="/api/shipments", tags=["shipments"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

    @app.get("/")
    async def root():
        return {"message": "Freight BI Dashboard API"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
