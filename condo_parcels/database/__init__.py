"""
The `database` package is responsible for all interactions with the package
tracking store. It provides configuration, entity definitions, data access and
the service functions the HTTP routers call.

Contents:
    - config:
        Settings and the engine / declarative base used by every entity.

    - entities:
        SQLAlchemy entity models: the directory tables, the package Ledger and
        the status History Log.

    - daos:
        Data Access Objects providing the reads and writes of each entity.

    - core:
        Service functions that connect the routers with the database: the
        transition engine, role-scoped queries, filters, validation and
        directory operations (login, profile, cascade deletes).

    - helpers:
        The `@transactional` decorator and the session factory wiring.
"""
