from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_cache, get_store
from app.core.exceptions import ResourceNotFoundError
from app.schemas.class_session import ClassSessionCreate, ClassSessionOut, ClassSessionUpdate
from app.schemas.common import ensure_time_order
from app.services.cache import TimetableCache, timetable_cache_key
from app.services.store import SqlAlchemyStore

router = APIRouter()


@router.get("/{user_id}", response_model=list[ClassSessionOut])
def list_sessions(
    user_id: str,
    course_id: str | None = Query(default=None),
    day_of_week: int | None = Query(default=None, ge=0, le=6),
    store: SqlAlchemyStore = Depends(get_store),
) -> list[ClassSessionOut]:
    return store.session_rows(user_id, course_id=course_id, day_of_week=day_of_week)


@router.post("/", response_model=ClassSessionOut, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: ClassSessionCreate,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
) -> ClassSessionOut:
    course = store.get_course(payload.course_id)
    if course is None:
        raise ResourceNotFoundError("Course", payload.course_id)
    session = store.create_session(payload.model_dump())
    cache.invalidate(timetable_cache_key(course.user_id))
    return session


@router.put("/{session_id}", response_model=ClassSessionOut)
def update_session(
    session_id: str,
    payload: ClassSessionUpdate,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
) -> ClassSessionOut:
    session = store.get_session(session_id)
    if session is None:
        raise ResourceNotFoundError("Session", session_id)

    data = payload.model_dump(exclude_unset=True)
    try:
        ensure_time_order(data.get("start_time", session.start_time), data.get("end_time", session.end_time))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    session = store.update_session(session, data)
    cache.invalidate(timetable_cache_key(session.course.user_id))
    return session


@router.delete("/{session_id}")
def delete_session(
    session_id: str,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
) -> dict:
    session = store.get_session(session_id)
    if session is None:
        raise ResourceNotFoundError("Session", session_id)
    user_id = session.course.user_id
    store.delete_session(session)
    cache.invalidate(timetable_cache_key(user_id))
    return {"success": True}
