"""SQLAlchemy engine construction for the Postgres substrate."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine

from resources.substrates.postgres.config import PostgresSettings

_SECONDS_PER_MINUTE = 60


def create_postgres_engine(settings: PostgresSettings) -> Engine:
    """Construct a configured SQLAlchemy engine using psycopg."""
    settings.ensure_valid()
    connect_args = {
        "connect_timeout": int(settings.connect_timeout_seconds),
        "sslmode": settings.sslmode,
        "options": f"-c TimeZone={settings.timezone}",
    }
    recycle = settings.conn_max_lifetime_minutes * _SECONDS_PER_MINUTE
    return create_engine(
        settings.resolved_url(),
        pool_size=settings.max_idle_conns,
        max_overflow=settings.max_open_conns - settings.max_idle_conns,
        pool_recycle=recycle if recycle > 0 else -1,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
