"""
Database configuration and session factory helpers.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./database/transportes.db"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Settings read from the environment (and .env, if present)."""

    def __init__(self, **overrides):
        self.database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.upload_dir = os.getenv("UPLOAD_DIR", "./uploads")
        self.sql_echo = _env_bool("SQL_ECHO")
        self.filter_debounce_ms = int(os.getenv("FILTER_DEBOUNCE_MS", "300"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
            if origin.strip()
        ]
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


settings = Settings()

Base = declarative_base()


def _ensure_sqlite_dir(database_url: str) -> None:
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return
    db_path = database_url[len(prefix):]
    if not db_path or db_path == ":memory:":
        return
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite files get their directory created first."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        _ensure_sqlite_dir(database_url)
        # FastAPI may run sync handlers in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
