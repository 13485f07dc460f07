"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds the SQLAlchemy Engine from an explicit URL (defaults to `settings.DB_URL`).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.
- Creates the schema on startup (`init_db`).

Notes
-----
- No engine is created at import time; callers construct one through
  `create_connection_engine(...)` and hand it to the session factory in
  `condo_parcels.database.helpers.transactionManagement`.
- SQLite URLs get `check_same_thread=False` so the engine can be shared by the
  FastAPI worker threads; in-memory SQLite additionally uses a `StaticPool`.
- Every SQLite connection enforces foreign keys and replaces the built-in
  ASCII-only `lower()` with Python's Unicode folding, so searches fold case the
  same way on SQLite and PostgreSQL.
- All ORM models must inherit from `declarativeBase` to participate in schema
  creation.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import MetaData
from condo_parcels.database.config.config import settings


def create_connection_engine(url: str | None = None, echo: bool = False) -> Engine:
    """
    Build a SQLAlchemy Engine.

    Parameters
    ----------
    url : str | None
        Database URL. Defaults to `settings.DB_URL`.
    echo : bool
        Emit SQL to the log (debugging aid).

    Returns
    -------
    Engine
        Engine object: manages connections, executes SQL, and pools.
    """
    url = url or settings.DB_URL
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        event.listen(engine, "connect", _sqlite_on_connect)
        return engine
    return create_engine(url, echo=echo, pool_pre_ping=True)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _sqlite_on_connect(dbapi_connection, connection_record):
    """Per-connection SQLite setup: foreign key enforcement and Unicode `lower()`."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


# --------------------------------------------------------------------
# Metadata object: stores schema-level information about tables,
# constraints, indexes, etc. Shared across all models.
# --------------------------------------------------------------------
metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables, constraints, indexes, etc. Shared across all models.
"""
# --------------------------------------------------------------------
# Declarative Base: root class for ORM models.
# --------------------------------------------------------------------
declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models.
All model classes should inherit from this to gain ORM features and automatic schema generation.
 """


def init_db(engine: Engine) -> None:
    """Create every table registered on `declarativeBase` (no-op for existing tables)."""
    # import entities so classes register to the metadata
    import condo_parcels.database.entities  # noqa: F401
    metadata.create_all(bind=engine)
