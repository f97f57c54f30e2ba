from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.session import SessionLocal
from app.services.cache import TimetableCache
from app.services.chat import ChatService
from app.services.store import SqlAlchemyStore
from app.services.timetable_generator import TimetableGenerator

_settings = get_settings()

timetable_cache = TimetableCache(
    session_factory=SessionLocal,
    max_memory_items=_settings.cache_max_memory_items,
    default_ttl_seconds=_settings.timetable_cache_ttl_seconds,
)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache() -> TimetableCache:
    return timetable_cache


def get_store(db: Session = Depends(get_db)) -> SqlAlchemyStore:
    return SqlAlchemyStore(db)


def get_generator(store: SqlAlchemyStore = Depends(get_store)) -> TimetableGenerator:
    return TimetableGenerator(store)


def get_chat_service(
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> ChatService:
    return ChatService(
        store=store,
        cache=cache,
        generator=TimetableGenerator(store),
        cache_ttl_seconds=settings.timetable_cache_ttl_seconds,
    )


def resolve_user_id(
    store: SqlAlchemyStore,
    user_id: str | None,
    settings: Settings,
) -> str:
    """Fall back to the single local user and make sure the row exists."""
    if user_id:
        store.ensure_user(user_id, name=settings.default_user_name)
        return user_id
    store.ensure_user(
        settings.default_user_id,
        name=settings.default_user_name,
        email=settings.default_user_email,
    )
    return settings.default_user_id
