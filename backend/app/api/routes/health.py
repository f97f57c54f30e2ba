from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import get_cache
from app.db.session import engine
from app.services.cache import TimetableCache

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "name", "preferences"},
    "courses": {"id", "user_id", "name", "priority", "color"},
    "sessions": {"id", "course_id", "type", "day_of_week", "start_time", "end_time", "is_active"},
    "constraints": {"id", "user_id", "type", "day_of_week", "start_time", "end_time", "is_active"},
    "timetables": {"id", "user_id", "data", "is_current", "score"},
    "cache_entries": {"key", "value", "expires_at"},
    "chat_messages": {"id", "user_id", "message", "response"},
}


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready(cache: TimetableCache = Depends(get_cache)) -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    db_error: str | None = None

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            inspector = inspect(connection)
            table_names = set(inspector.get_table_names())
            for table_name, columns in REQUIRED_COLUMNS.items():
                if table_name not in table_names:
                    missing_tables.append(table_name)
                    continue
                existing = {item["name"] for item in inspector.get_columns(table_name)}
                missing = sorted(columns - existing)
                if missing:
                    missing_columns[table_name] = missing
    except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
        logger.warning("READINESS DATABASE CHECK FAILED | error=%s", exc)
        db_ok = False
        db_error = str(exc)

    schema_ok = not missing_tables and not missing_columns
    ready = db_ok and schema_ok
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": schema_ok,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
            "error": db_error,
        },
        "cache": cache.stats(),
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
