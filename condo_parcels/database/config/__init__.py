"""
The `config` package provides two core building blocks for establishing and managing database connections.

Contents:
    - config: Configuration layer - strongly typed app settings loaded from environment variables (with .env support), exposed through a singleton Settings object
    - connection_engine: Database layer - SQLAlchemy bootstrap that builds the Engine from those settings, the shared MetaData, the declarative base for ORM models and schema creation

Together they provide environment-driven configuration and a clean ORM foundation.
"""
