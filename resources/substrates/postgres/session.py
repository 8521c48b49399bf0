"""Session helpers for code that talks to the Postgres substrate."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Bind a session factory to ``engine``; loaded objects survive commit."""
    return sessionmaker(engine, autoflush=False, expire_on_commit=False)


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Run one unit of work: commit when the block succeeds, else roll back."""
    with session_factory.begin() as session:
        yield session
