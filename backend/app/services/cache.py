from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.cache_entry import CacheEntry

logger = logging.getLogger(__name__)

TIMETABLE_KEY_PREFIX = "timetable:"


def timetable_cache_key(user_id: str) -> str:
    return f"{TIMETABLE_KEY_PREFIX}{user_id}"


@dataclass
class _MemoryItem:
    value: Any
    expires_at: float | None


class TimetableCache:
    """Two-tier cache: a bounded in-memory map in front of the ``cache_entries`` table.

    The database tier is optional. When it fails the error is logged and the
    cache carries on with the memory tier alone. A failed invalidation is kept
    pending and retried before the database tier is read or written again, so
    an invalidated row is never served.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session] | None = None,
        max_memory_items: int = 1000,
        default_ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session_factory = session_factory
        self._max_memory_items = max(1, max_memory_items)
        self._default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._memory: OrderedDict[str, _MemoryItem] = OrderedDict()
        self._pending_deletes: dict[str, Any] = {}
        self._lock = Lock()

    def _now_datetime(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def _expires_at(self, ttl_seconds: int | None) -> float | None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl_seconds
        if not ttl:
            return None
        return self._clock() + ttl

    def _remember(self, key: str, value: Any, expires_at: float | None) -> None:
        with self._lock:
            if key in self._memory:
                self._memory.pop(key)
            elif len(self._memory) >= self._max_memory_items:
                # Oldest insertion goes first.
                self._memory.popitem(last=False)
            self._memory[key] = _MemoryItem(value=value, expires_at=expires_at)

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            item = self._memory.get(key)
            if item is not None:
                if item.expires_at is None or item.expires_at > now:
                    return item.value
                del self._memory[key]

        if self._session_factory is None:
            return None
        if not self._flush_pending_deletes():
            return None
        try:
            with self._session_factory() as db:
                row = (
                    db.execute(
                        select(CacheEntry).where(
                            CacheEntry.key == key,
                            or_(CacheEntry.expires_at.is_(None), CacheEntry.expires_at > self._now_datetime()),
                        )
                    )
                    .scalars()
                    .first()
                )
                if row is None:
                    return None
                value = row.value
                expires_at = _as_timestamp(row.expires_at)
        except SQLAlchemyError:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

        self._remember(key, value, expires_at)
        return value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        expires_at = self._expires_at(ttl_seconds)
        self._remember(key, value, expires_at)
        if self._session_factory is None:
            return True
        if not self._flush_pending_deletes():
            return False
        try:
            with self._session_factory() as db:
                row = db.get(CacheEntry, key)
                expires_dt = datetime.fromtimestamp(expires_at, tz=timezone.utc) if expires_at is not None else None
                if row is None:
                    db.add(CacheEntry(key=key, value=value, expires_at=expires_dt))
                else:
                    row.value = value
                    row.expires_at = expires_dt
                db.commit()
        except SQLAlchemyError:
            logger.warning("Cache write failed for %s", key, exc_info=True)
            return False
        return True

    def invalidate(self, key: str) -> bool:
        with self._lock:
            self._memory.pop(key, None)
        return self._delete_persisted(CacheEntry.key == key, key)

    def invalidate_prefix(self, prefix: str) -> bool:
        with self._lock:
            for key in [item for item in self._memory if item.startswith(prefix)]:
                del self._memory[key]
        return self._delete_persisted(CacheEntry.key.startswith(prefix, autoescape=True), f"{prefix}*")

    def cleanup(self) -> int:
        """Drop expired entries from both tiers; returns how many memory entries went."""
        now = self._clock()
        with self._lock:
            expired = [key for key, item in self._memory.items() if item.expires_at is not None and item.expires_at <= now]
            for key in expired:
                del self._memory[key]
        self._delete_persisted(
            CacheEntry.expires_at.is_not(None) & (CacheEntry.expires_at <= self._now_datetime()),
            "expired",
            retry=False,
        )
        logger.debug("Cache cleanup removed %d memory entr%s", len(expired), "y" if len(expired) == 1 else "ies")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._memory.clear()
        self._delete_persisted(None, "*")

    def stats(self) -> dict[str, int | None]:
        with self._lock:
            size = len(self._memory)
        return {
            "memory_items": size,
            "max_memory_items": self._max_memory_items,
            "default_ttl_seconds": self._default_ttl_seconds,
        }

    def _delete_persisted(self, condition, label: str, *, retry: bool = True) -> bool:
        if self._session_factory is None:
            return True
        if self._flush_pending_deletes() and self._execute_delete(condition, label):
            return True
        if retry:
            with self._lock:
                self._pending_deletes[label] = condition
        return False

    def _flush_pending_deletes(self) -> bool:
        with self._lock:
            pending = list(self._pending_deletes.items())
        for label, condition in pending:
            if not self._execute_delete(condition, label):
                return False
            with self._lock:
                # Unless a newer failure re-queued the same label.
                if self._pending_deletes.get(label) is condition:
                    del self._pending_deletes[label]
        if pending:
            logger.info("Cache pending deletes flushed | count=%d", len(pending))
        return True

    def _execute_delete(self, condition, label: str) -> bool:
        statement = delete(CacheEntry)
        if condition is not None:
            statement = statement.where(condition)
        try:
            with self._session_factory() as db:
                db.execute(statement)
                db.commit()
        except SQLAlchemyError:
            logger.warning("Cache delete failed for %s", label, exc_info=True)
            return False
        return True


def _as_timestamp(value: datetime | None) -> float | None:
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite hands back naive datetimes; everything is written in UTC.
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()
