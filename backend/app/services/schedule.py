from __future__ import annotations

from dataclasses import dataclass, field

from app.services.time_slots import DAY_NAMES, duration, parse_time_to_minutes


@dataclass(frozen=True)
class CourseRecord:
    id: str
    priority: int = 1
    name: str = ""
    code: str = ""
    color: str | None = None


@dataclass(frozen=True)
class SessionRecord:
    id: str
    course_id: str
    type: str | None
    day_of_week: int | None
    start_time: str | None
    end_time: str | None
    location: str | None = None
    instructor: str | None = None
    course_name: str | None = None
    course_code: str | None = None
    course_color: str | None = None


@dataclass(frozen=True)
class ConstraintRecord:
    type: str
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    id: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class Placement:
    session: SessionRecord
    day_of_week: int
    start_time: str
    end_time: str
    is_alternative: bool = False
    is_different_day: bool = False

    @property
    def duration(self) -> int:
        return duration(self.start_time, self.end_time)

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)


@dataclass(frozen=True)
class Conflict:
    session: SessionRecord
    reason: str
    suggestions: tuple[str, ...]


@dataclass
class DaySchedule:
    day: int
    placements: list[Placement] = field(default_factory=list)
    total_hours: float = 0.0

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day]

    def gaps(self) -> list[int]:
        """Minutes between each placement's end and the next one's start."""
        return [
            later.start_minutes - earlier.end_minutes
            for earlier, later in zip(self.placements, self.placements[1:])
        ]

    def back_to_back_pairs(self) -> int:
        return sum(
            1
            for earlier, later in zip(self.placements, self.placements[1:])
            if earlier.end_time == later.start_time
        )


class WeekSchedule:
    """Seven day buckets, Sunday (0) through Saturday (6)."""

    def __init__(self) -> None:
        self.days: dict[int, DaySchedule] = {day: DaySchedule(day=day) for day in range(len(DAY_NAMES))}

    def __getitem__(self, day: int) -> DaySchedule:
        return self.days[day]

    def __iter__(self):
        return iter(self.days[day] for day in sorted(self.days))

    def place(self, placement: Placement) -> None:
        bucket = self.days[placement.day_of_week]
        bucket.placements.append(placement)
        bucket.placements.sort(key=lambda item: item.start_minutes)
        bucket.total_hours += placement.duration / 60

    def daily_hours(self) -> list[float]:
        return [bucket.total_hours for bucket in self]

    def imbalance(self) -> float:
        hours = self.daily_hours()
        return max(hours) - min(hours)

    def placements(self) -> list[Placement]:
        return [placement for bucket in self for placement in bucket.placements]
