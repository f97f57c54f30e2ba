import logging
from time import perf_counter

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_cache, get_generator, get_store
from app.core.config import Settings, get_settings
from app.core.exceptions import AppError
from app.schemas.timetable import CacheStatsOut, GenerationResult, SavedTimetableOut
from app.services.cache import TimetableCache, timetable_cache_key
from app.services.store import SqlAlchemyStore
from app.services.timetable_generator import TimetableGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


def _generate(generator: TimetableGenerator, user_id: str, trigger: str) -> GenerationResult:
    started = perf_counter()
    logger.info("TIMETABLE GENERATION START | user_id=%s | trigger=%s", user_id, trigger)
    try:
        return generator.generate(user_id)
    except AppError:
        logger.exception(
            "TIMETABLE GENERATION FAILED | user_id=%s | trigger=%s | wall_ms=%s",
            user_id,
            trigger,
            int((perf_counter() - started) * 1000),
        )
        raise


@router.get("/cache/stats", response_model=CacheStatsOut)
def cache_stats(cache: TimetableCache = Depends(get_cache)) -> CacheStatsOut:
    return CacheStatsOut(**cache.stats())


@router.get("/{user_id}", response_model=GenerationResult)
def get_timetable(
    user_id: str,
    generator: TimetableGenerator = Depends(get_generator),
    cache: TimetableCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> GenerationResult:
    key = timetable_cache_key(user_id)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("TIMETABLE CACHE HIT | user_id=%s", user_id)
        return GenerationResult.model_validate(cached)

    result = _generate(generator, user_id, "read")
    cache.set(key, result.model_dump(mode="json"), settings.timetable_cache_ttl_seconds)
    return result


@router.post("/regenerate/{user_id}", response_model=GenerationResult)
def regenerate_timetable(
    user_id: str,
    store: SqlAlchemyStore = Depends(get_store),
    generator: TimetableGenerator = Depends(get_generator),
    cache: TimetableCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> GenerationResult:
    key = timetable_cache_key(user_id)
    cache.invalidate(key)
    result = _generate(generator, user_id, "regenerate")
    data = result.model_dump(mode="json")
    store.save_timetable(user_id, "Generated Timetable", data, result.score)
    cache.set(key, data, settings.timetable_cache_ttl_seconds)
    return result


@router.post("/optimize/{user_id}", response_model=GenerationResult)
def optimize_timetable(
    user_id: str,
    store: SqlAlchemyStore = Depends(get_store),
    generator: TimetableGenerator = Depends(get_generator),
    cache: TimetableCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> GenerationResult:
    key = timetable_cache_key(user_id)
    cached = cache.get(key)
    if cached is not None:
        previous = GenerationResult.model_validate(cached)
    else:
        saved = store.get_current_timetable(user_id)
        if saved is not None:
            previous = GenerationResult.model_validate(saved.data)
        else:
            previous = _generate(generator, user_id, "optimize")

    result = generator.optimize(user_id, previous)
    cache.set(key, result.model_dump(mode="json"), settings.timetable_cache_ttl_seconds)
    logger.info(
        "TIMETABLE OPTIMIZED | user_id=%s | previous_score=%s | score=%s",
        user_id,
        previous.score,
        result.score,
    )
    return result


@router.get("/{user_id}/history", response_model=list[SavedTimetableOut])
def timetable_history(
    user_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    store: SqlAlchemyStore = Depends(get_store),
) -> list[SavedTimetableOut]:
    return store.list_timetable_history(user_id, limit=limit)
