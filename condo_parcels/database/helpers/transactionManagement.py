"""
Database Transaction Management
===============================

This module provides utilities for managing SQLAlchemy database sessions
using Python context variables and a decorator-based transaction wrapper.

It allows seamless propagation of a database session across function calls
without explicitly threading it through arguments. Functions can be safely
decorated with ``@transactional`` to ensure they run inside a managed
transactional context.

Key features
~~~~~~~~~~~~
- Explicitly configured session factory (bound to an Engine at startup or in tests)
- Context variable to store the active session
- Caller-supplied sessions are honoured (``session=...``)
- Implicit reuse of existing sessions, so nested service calls share one transaction
- Automatic commit and rollback handling
- Clean session closure after execution

"""

import contextvars
import logging
from functools import wraps

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from condo_parcels.database.config.connection_engine import create_connection_engine

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------
# Context variable to store the current database session.
# This ensures a session can be passed implicitly across function calls
# without explicitly threading it through arguments.
# --------------------------------------------------------------------
db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""

_session_factory: sessionmaker | None = None


def configure_session_factory(engine: Engine) -> sessionmaker:
    """
    Bind the session factory used by ``@transactional`` to ``engine``.

    Parameters
    ----------
    engine : Engine
        The engine every new transaction should draw its connection from.

    Returns
    -------
    sessionmaker
        The configured factory.
    """
    global _session_factory
    _session_factory = sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)
    return _session_factory


def get_session_factory() -> sessionmaker:
    """Return the configured factory, building one from ``settings.DB_URL`` on first use."""
    if _session_factory is None:
        configure_session_factory(create_connection_engine())
    return _session_factory


def transactional(func):
    """
    Decorator to wrap functions in a managed SQLAlchemy transaction.

    Ensures that:
    - If the caller passes ``session=...``, that session is used as-is and the
      caller owns commit/rollback.
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created, committed, and closed.
    - On errors, the session is rolled back and closed, and the error re-raised.

    Parameters
    ----------
    func : callable
        The function to wrap. It must accept a `session` keyword argument.

    Returns
    -------
    callable
        The wrapped function, executed within a database transaction.

    Example
    -------
    >>> @transactional
    ... def rename_building(session, building_id: int, name: str):
    ...     session.get(Building, building_id).building_name = name
    ...
    >>> rename_building(building_id=1, name="Tower A")
    """
    @wraps(func)
    def wrap_func(*args, session=None, **kwargs):
        if session is not None:
            return func(*args, session=session, **kwargs)

        # Try to get an existing session from context
        session = db_session_context.get()
        if session is not None:
            return func(*args, session=session, **kwargs)

        # Create a new session if none exists
        session = get_session_factory()()
        token = db_session_context.set(session)

        try:
            result = func(*args, session=session, **kwargs)
            session.flush()   # Push pending changes
            session.commit()  # Commit transaction
        except Exception:
            logger.debug("Rolling back transaction opened by %s", func.__qualname__)
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

        return result

    return wrap_func
