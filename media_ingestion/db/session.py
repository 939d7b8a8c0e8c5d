"""SQLAlchemy session setup."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def make_engine(db_url: str):
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection so every thread sees the same in-memory database
        return create_engine(
            db_url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if db_url.startswith("sqlite"):
        return create_engine(db_url, future=True, connect_args={"check_same_thread": False})
    return create_engine(db_url, future=True)


def make_session_factory(db_url: str | None = None, engine=None):
    if engine is None:
        if not db_url:
            raise ValueError("db_url is required when engine is not provided")
        engine = make_engine(db_url)
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False, future=True)
