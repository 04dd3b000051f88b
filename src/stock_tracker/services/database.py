"""
SQLAlchemy plumbing for the product table.

Owned by the application shell:
- initialize_app_database() at startup builds the engine, creates the
  products table and returns the session factory handed to the backend
- close_connections() at shutdown releases everything

Backends receive their session factory explicitly and open one
session_scope() per operation.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, close_all_sessions, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.base import Base
from ..utils.config import get_config
from ..utils.constants import TABLE_PRODUCT

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None

MEMORY_URL_MARKERS = (":memory:", "mode=memory")


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Switch every new SQLite connection to WAL journaling."""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()


def _is_memory_url(database_url: str) -> bool:
    return any(marker in database_url for marker in MEMORY_URL_MARKERS)


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL.

    Args:
        database_url: SQLAlchemy URL; the configured SQLite file when None
        echo: Log every SQL statement

    Returns:
        Engine. In-memory URLs get a StaticPool so the database survives
        between sessions.
    """
    url = database_url or get_config().database_url
    logger.info(f"Opening database {url}")

    if _is_memory_url(url):
        return create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_engine(url, echo=echo, connect_args={"check_same_thread": False, "timeout": 30})


def init_database(engine: Optional[Engine] = None) -> None:
    """Create the products table when missing. Repeated calls are harmless."""
    target = engine if engine is not None else get_engine()

    # Importing the package registers Product on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(target)
    logger.info(f"Schema ready on {target.url}")


def get_engine(database_url: Optional[str] = None, force_recreate: bool = False) -> Engine:
    """
    Shared engine, built on first call.

    database_url only matters for the call that builds the engine.
    """
    global _engine

    if force_recreate or _engine is None:
        _engine = create_database_engine(database_url)
    return _engine


def get_session_factory() -> sessionmaker:
    """Shared session factory on the shared engine."""
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


@contextmanager
def session_scope(session_factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """
    One unit of work: commit when the block succeeds, roll back when it
    raises, close the session either way.

    Args:
        session_factory: Where sessions come from; the shared factory if None

    Example:
        with session_scope(factory) as session:
            session.add(Product(key="bolt", display_name="Bolt"))
    """
    factory = session_factory if session_factory is not None else get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def verify_database(engine: Optional[Engine] = None) -> bool:
    """True if the products table exists."""
    target = engine if engine is not None else get_engine()
    return TABLE_PRODUCT in inspect(target).get_table_names()


def close_connections() -> None:
    """Close open sessions and dispose of the shared engine."""
    global _engine, _SessionFactory

    if _SessionFactory is not None:
        close_all_sessions()
    _SessionFactory = None

    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None


def initialize_app_database(database_url: Optional[str] = None) -> sessionmaker:
    """
    Prepare the database the application runs on.

    Without an explicit URL the configured data folder is created first, so
    SQLite can create its file there.

    Args:
        database_url: Overrides the configured database

    Returns:
        The shared session factory
    """
    if database_url is None:
        config = get_config()
        config.ensure_directories()
        state = "existing" if config.database_exists() else "new"
        logger.info(f"Using {state} database at {config.database_path}")

    engine = get_engine(database_url)
    init_database(engine)

    if not verify_database(engine):
        logger.warning(f"Table '{TABLE_PRODUCT}' missing after initialization")

    return get_session_factory()
