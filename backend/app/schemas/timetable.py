from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SessionSnapshot(BaseModel):
    id: str
    course_id: str
    type: str | None = None
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None
    instructor: str | None = None
    course_name: str | None = None
    course_code: str | None = None
    course_color: str | None = None


class PlacedSession(SessionSnapshot):
    day_of_week: int
    start_time: str
    end_time: str
    duration: int
    requested_day_of_week: int | None = None
    requested_start_time: str | None = None
    requested_end_time: str | None = None
    is_alternative: bool = False
    is_different_day: bool = False


class DayScheduleOut(BaseModel):
    day: int
    day_name: str
    sessions: list[PlacedSession] = Field(default_factory=list)
    total_hours: float = 0.0


class ConflictOut(BaseModel):
    session: SessionSnapshot
    reason: str
    suggestions: list[str] = Field(default_factory=list)


class TimetableStats(BaseModel):
    total_sessions: int = 0
    total_hours: float = 0.0
    average_hours_per_day: float = 0.0
    working_days: int = 0
    sessions_by_type: dict[str, int] = Field(default_factory=dict)
    sessions_by_day: dict[str, int] = Field(default_factory=dict)


class GenerationResult(BaseModel):
    # Keys are day numbers, 0 (Sunday) through 6 (Saturday).
    schedule: dict[int, DayScheduleOut]
    conflicts: list[ConflictOut] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    score: float = Field(ge=0, le=100)
    stats: TimetableStats = Field(default_factory=TimetableStats)
    generated_at: datetime
    optimized_at: datetime | None = None


class SavedTimetableOut(BaseModel):
    id: str
    user_id: str
    name: str
    is_current: bool
    score: float | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class CacheStatsOut(BaseModel):
    memory_items: int
    max_memory_items: int
    default_ttl_seconds: int | None = None
