from fastapi import APIRouter, Depends, status

from app.api.deps import get_cache, get_store, resolve_user_id
from app.core.config import Settings, get_settings
from app.core.exceptions import ResourceNotFoundError
from app.schemas.constraint import ConstraintCreate, ConstraintOut
from app.services.cache import TimetableCache, timetable_cache_key
from app.services.store import SqlAlchemyStore

router = APIRouter()


@router.get("/{user_id}", response_model=list[ConstraintOut])
def list_constraints(user_id: str, store: SqlAlchemyStore = Depends(get_store)) -> list[ConstraintOut]:
    return store.constraint_rows(user_id)


@router.post("/", response_model=ConstraintOut, status_code=status.HTTP_201_CREATED)
def create_constraint(
    payload: ConstraintCreate,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> ConstraintOut:
    user_id = resolve_user_id(store, payload.user_id, settings)
    constraint = store.create_constraint(user_id, payload.model_dump(exclude={"user_id"}))
    cache.invalidate(timetable_cache_key(user_id))
    return constraint


@router.delete("/{constraint_id}")
def delete_constraint(
    constraint_id: str,
    store: SqlAlchemyStore = Depends(get_store),
    cache: TimetableCache = Depends(get_cache),
) -> dict:
    constraint = store.get_constraint(constraint_id)
    if constraint is None:
        raise ResourceNotFoundError("Constraint", constraint_id)
    user_id = constraint.user_id
    store.delete_constraint(constraint)
    cache.invalidate(timetable_cache_key(user_id))
    return {"success": True}
