from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

import app.models  # noqa: F401
from app.core.config import Settings, get_settings
from app.db.base import Base
from app.db.session import engine as default_engine
from app.models.user import User

logger = logging.getLogger(__name__)

REQUIRED_TABLES = {"users", "courses", "sessions", "constraints", "timetables", "cache_entries", "chat_messages"}


def _assert_required_tables(engine: Engine) -> None:
    with engine.connect() as connection:
        table_names = set(inspect(connection).get_table_names())
    missing = sorted(REQUIRED_TABLES - table_names)
    if missing:
        raise RuntimeError(f"Missing required tables: {', '.join(missing)}")


def _ensure_default_user(engine: Engine, settings: Settings) -> None:
    with Session(engine) as db:
        if db.get(User, settings.default_user_id) is not None:
            return
        db.add(
            User(
                id=settings.default_user_id,
                name=settings.default_user_name,
                email=settings.default_user_email,
                preferences={},
            )
        )
        db.commit()
        logger.info("DEFAULT USER CREATED | user_id=%s", settings.default_user_id)


def ensure_runtime_schema(engine: Engine | None = None, settings: Settings | None = None) -> None:
    engine = engine or default_engine
    settings = settings or get_settings()
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_tables(engine)
        _ensure_default_user(engine, settings)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
