"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds a SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models and the session factory
  used by the `@transactional` helper.

Notes
-----
- Uses `URL.create(...)` so credentials stay environment-driven.
- SQLite connections are opened with `check_same_thread=False` because FastAPI
  runs sync work in a threadpool.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.schema import MetaData
from legal_eagle.database.config.config import settings

connection_url = URL.create(
    drivername=settings.DB_DRIVER_NAME,
    username=settings.DB_USERNAME,
    password=settings.DB_PASSWORD,
    host=settings.DB_HOST,
    port=settings.DB_PORT,
    database=settings.DB_DATABASE_NAME,
)
"""Constructs the SQLAlchemy connection URL using values from Settings."""

connect_args = {"check_same_thread": False} if settings.DB_DRIVER_NAME.startswith("sqlite") else {}

connection_engine = create_engine(connection_url, connect_args=connect_args, pool_pre_ping=True)
"""Engine object: Core interface to the database.
Responsible for managing connections, executing SQL, and pooling.
"""

metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables, constraints, indexes, etc. Shared across all models.
"""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models."""

SessionFactory = sessionmaker(bind=connection_engine, expire_on_commit=False)
"""Session factory bound to the engine. `expire_on_commit=False` keeps returned
entities readable after the transaction that loaded them has committed."""
