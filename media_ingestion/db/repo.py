"""Repository layer for the durable cache table."""

from __future__ import annotations

from datetime import datetime, timedelta
import logging

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, sessionmaker

from media_ingestion.db.models import CacheEntry
from media_ingestion.db.session import Base, make_session_factory
from media_ingestion.util.json import make_json_safe


logger = logging.getLogger(__name__)


class CacheRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str, now: datetime | None = None) -> dict | None:
        stmt = select(CacheEntry).where(CacheEntry.key == key)
        entry = self.session.execute(stmt).scalar_one_or_none()
        if entry is None:
            return None
        now = now or datetime.utcnow()
        if entry.expires_at is not None and entry.expires_at <= now:
            self.delete(key)
            return None
        return entry.value

    def set(self, key: str, value: dict, expires_at: datetime | None = None) -> None:
        payload = {
            "key": key,
            "value": value,
            "expires_at": expires_at,
            "updated_at": datetime.utcnow(),
        }
        stmt = sqlite_insert(CacheEntry).values(**payload)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheEntry.key],
            set_={k: v for k, v in payload.items() if k != "key"},
        )
        self.session.execute(stmt)
        self.session.commit()

    def delete(self, key: str) -> None:
        self.session.execute(delete(CacheEntry).where(CacheEntry.key == key))
        self.session.commit()


class SqlCacheStore:
    """Durable key-value cache; one short-lived session per call so it is safe across threads."""

    def __init__(self, session_factory: sessionmaker, ttl_seconds: float | None = None) -> None:
        self.session_factory = session_factory
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_engine(cls, engine, ttl_seconds: float | None = None) -> "SqlCacheStore":
        Base.metadata.create_all(engine)
        return cls(make_session_factory(engine=engine), ttl_seconds)

    def get(self, key: str) -> dict | None:
        with self.session_factory() as session:
            return CacheRepository(session).get(key)

    def set(self, key: str, value: dict) -> None:
        expires_at = None
        if self.ttl_seconds:
            expires_at = datetime.utcnow() + timedelta(seconds=self.ttl_seconds)
        with self.session_factory() as session:
            CacheRepository(session).set(key, make_json_safe(value), expires_at=expires_at)
        logger.debug("Durable cache write: %s", key)

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            CacheRepository(session).delete(key)
