"""
Database configuration and session management for the surveillance store.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Create declarative base
Base = declarative_base()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite databases share one connection so every session sees
    the same tables.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(
        database_url,
        echo=echo,  # Set to True for SQL query logging
        pool_pre_ping=True,
        pool_recycle=300,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """
    Provide a transactional scope around a series of operations.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_tables(engine: Engine):
    """
    Create all tables in the database.
    """
    # registers the mapped classes on Base.metadata
    from jalsuraksha import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine):
    """
    Drop all tables in the database.
    """
    Base.metadata.drop_all(bind=engine)


def init_database(database_url: str, echo: bool = False, engine: Optional[Engine] = None) -> sessionmaker:
    """Create tables if needed and return a session factory."""
    engine = engine or make_engine(database_url, echo=echo)
    create_tables(engine)
    return make_session_factory(engine)
