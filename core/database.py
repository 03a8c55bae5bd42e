"""
SQLite database connection and setup for the submissions store
"""
import os
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import DATABASE_URL

# Base class for ORM models
Base = declarative_base()


def _ensure_sqlite_dir(url: str) -> None:
    if not url.startswith("sqlite:///"):
        return
    path = url[len("sqlite:///"):]
    if not path or path.startswith(":memory:") or path.startswith("file:"):
        return
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """
    Create the SQLAlchemy engine for the given URL.
    SQLite handles are shared across the request threadpool, so
    same-thread checking is disabled; SQLite's own locking serializes writers.
    """
    _ensure_sqlite_dir(url)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=False,  # Set to True for SQL query logging in development
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """
    Create tables that do not exist yet.
    Idempotent; call this on application startup
    """
    # Register models with Base before create_all
    import models.submission  # noqa: F401

    Base.metadata.create_all(bind=engine)
