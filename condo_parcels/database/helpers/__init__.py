"""
The `helpers` package provides utility functions and decorators
that support database operations and cross-cutting concerns.

These helpers simplify transaction handling, ensure consistent
session management, and reduce boilerplate across DAOs and services.

Contents
--------
- transactionManagement
    Provides tools for database transaction management:
        - `configure_session_factory(engine)` binds the factory new transactions draw from
        - Context variable (`db_session_context`) for propagating the active session across function calls without explicit passing
        - `@transactional` decorator for wrapping functions in a managed transaction:
            - Uses a caller-supplied `session=` when given
            - Reuses an existing session if one is active in context
            - Creates, commits, and closes a new session otherwise
            - Rolls back the session on errors
"""
