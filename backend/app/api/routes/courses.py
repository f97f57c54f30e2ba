from fastapi import APIRouter, Depends, status

from app.api.deps import get_cache, get_store, resolve_user_id
from app.core.config import Settings, get_settings
from app.core.exceptions import ResourceNotFoundError
from app.schemas.course import CourseCreate, CourseOut, CourseUpdate
from app.services.cache import TimetableCache, timetable_cache_key
from app.services.store import SqlAlchemyStore

router = APIRouter()


@router.get("/{user_id}", response_model=list[CourseOut])
def list_courses(user_id: str, store: SqlAlchemyStore = Depends(get_store)) -> list[CourseOut]:
    return store.course_rows(user_id)


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> CourseOut:
    user_id = resolve_user_id(store, payload.user_id, settings)
    course = store.create_course(user_id, payload.model_dump(exclude={"user_id"}))
    cache.invalidate(timetable_cache_key(user_id))
    return course


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str,
    payload: CourseUpdate,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
) -> CourseOut:
    course = store.get_course(course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)

    data = payload.model_dump(exclude_unset=True)
    course = store.update_course(course, data)
    cache.invalidate(timetable_cache_key(course.user_id))
    return course


@router.delete("/{course_id}")
def delete_course(
    course_id: str,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
) -> dict:
    course = store.get_course(course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    user_id = course.user_id
    store.delete_course(course)
    cache.invalidate(timetable_cache_key(user_id))
    return {"success": True}
