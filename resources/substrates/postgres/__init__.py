"""Postgres substrate primitives for SIAM services."""

from resources.substrates.postgres.config import PostgresSettings
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.session import (
    create_session_factory,
    transactional_session,
)

__all__ = [
    "PostgresSettings",
    "create_postgres_engine",
    "create_session_factory",
    "transactional_session",
]
