"""Configuration model for the Postgres substrate."""

from __future__ import annotations

from typing import Final
from urllib.parse import quote_plus

from pydantic import BaseModel, Field

SSL_MODES: Final[frozenset[str]] = frozenset(
    {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
)


class PostgresSettings(BaseModel):
    """Connection and pool settings for the optional Postgres backend.

    ``url`` wins when set; otherwise the URL is assembled from the split
    host/port/user/password/database fields. SQLAlchemy pools have no idle
    eviction, so ``conn_max_idle_time_minutes`` is carried for configuration
    compatibility and only the lifetime limit is enforced.
    """

    enabled: bool = False
    url: str = ""
    host: str = "localhost"
    port: int = 5432
    user: str = ""
    password: str = ""
    database: str = ""
    sslmode: str = "disable"
    timezone: str = "Asia/Shanghai"
    max_idle_conns: int = 100
    max_open_conns: int = 100
    conn_max_idle_time_minutes: int = Field(default=10, ge=0)
    conn_max_lifetime_minutes: int = Field(default=30, ge=0)
    connect_timeout_seconds: float = 10.0

    def resolved_url(self) -> str:
        """Return the SQLAlchemy psycopg URL for these settings."""
        url = self.url.strip()
        if url:
            return url
        if not self.host.strip():
            raise ValueError("postgres.host is required when postgres.url is unset")
        if not self.database.strip():
            raise ValueError("postgres.database is required when postgres.url is unset")
        if not self.user.strip():
            raise ValueError("postgres.user is required when postgres.url is unset")
        return (
            "postgresql+psycopg://"
            f"{quote_plus(self.user)}:{quote_plus(self.password)}"
            f"@{self.host.strip()}:{self.port}/{quote_plus(self.database)}"
        )

    def ensure_valid(self) -> None:
        """Validate settings required for reliable connectivity."""
        if self.max_idle_conns <= 0:
            raise ValueError("postgres.max_idle_conns must be > 0")
        if self.max_open_conns < self.max_idle_conns:
            raise ValueError("postgres.max_open_conns must be >= postgres.max_idle_conns")
        if self.connect_timeout_seconds <= 0:
            raise ValueError("postgres.connect_timeout_seconds must be > 0")
        if self.sslmode not in SSL_MODES:
            raise ValueError(
                "postgres.sslmode must be one of: "
                "disable, allow, prefer, require, verify-ca, verify-full"
            )
