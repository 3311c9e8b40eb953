import os
import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from eduportal_backend.settings import settings

logger = logging.getLogger(__name__)

POSTGRES_URL = os.environ.get("POSTGRES_URL")
POSTGRES_USER = os.environ.get("POSTGRES_USER")
POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD")
POSTGRES_DB = os.environ.get("POSTGRES_DB")

_database_options = {
    "pool_pre_ping": True,
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 300
}

def database_url() -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return f"postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_URL}/{POSTGRES_DB}"

def _engine_options(url: str) -> dict:
    # sqlite has no connection pool to tune
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return _database_options

_engine = create_engine(database_url(), **_engine_options(database_url()))
_SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

def get_engine():
    return _engine

def get_db() -> Generator[Session, None, None]:

    db = _SessionLocal()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()
