"""Seed a small demo week for the default Hanu-Planner user.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os

from app.core.config import get_settings
from app.db.bootstrap import ensure_runtime_schema
from app.db.session import SessionLocal
from app.services.store import SqlAlchemyStore
from app.services.timetable_generator import TimetableGenerator

RESET_EXISTING = os.getenv("SEED_RESET_EXISTING", "false").strip().lower() in {"1", "true", "yes", "on"}

DEMO_COURSES = [
    {
        "course": {"name": "Data Structures", "code": "CS201", "priority": 1, "credits": 4, "color": "#3B82F6"},
        "sessions": [
            {"type": "lecture", "day_of_week": 1, "start_time": "09:00", "end_time": "10:30", "location": "Room A101"},
            {"type": "lab", "day_of_week": 3, "start_time": "14:00", "end_time": "16:00", "location": "Lab 2"},
        ],
    },
    {
        "course": {"name": "Linear Algebra", "code": "MA202", "priority": 2, "credits": 3, "color": "#10B981"},
        "sessions": [
            {"type": "lecture", "day_of_week": 1, "start_time": "09:30", "end_time": "11:00", "location": "Hall B"},
            {"type": "tutorial", "day_of_week": 4, "start_time": "10:00", "end_time": "11:00", "location": "Room C12"},
        ],
    },
    {
        "course": {"name": "Technical Writing", "code": "EN110", "priority": 3, "credits": 2, "color": "#F59E0B"},
        "sessions": [
            {"type": "seminar", "day_of_week": 5, "start_time": "13:00", "end_time": "15:00", "location": "Room D4"},
        ],
    },
]

DEMO_CONSTRAINTS = [
    {"type": "unavailable", "day_of_week": 5, "start_time": "12:00", "end_time": "18:00", "description": "Part-time job"},
    {"type": "preferred", "day_of_week": None, "start_time": "09:00", "end_time": "17:00", "description": "Daytime"},
]


def reset_user_data(store: SqlAlchemyStore, user_id: str) -> None:
    for course in store.course_rows(user_id):
        store.delete_course(course)
    for constraint in store.constraint_rows(user_id):
        store.delete_constraint(constraint)


def main() -> None:
    settings = get_settings()
    ensure_runtime_schema()
    user_id = settings.default_user_id

    with SessionLocal() as session:
        store = SqlAlchemyStore(session)
        if RESET_EXISTING:
            reset_user_data(store, user_id)

        existing = {course.code for course in store.course_rows(user_id)}
        for item in DEMO_COURSES:
            if item["course"]["code"] in existing:
                continue
            course = store.create_course(user_id, item["course"])
            for session_data in item["sessions"]:
                store.create_session({"course_id": course.id, **session_data})
        if not store.constraint_rows(user_id):
            for constraint in DEMO_CONSTRAINTS:
                store.create_constraint(user_id, constraint)

        result = TimetableGenerator(store).generate(user_id)
        store.save_timetable(user_id, "Demo Timetable", result.model_dump(mode="json"), result.score)

    print("Demo data seeded successfully.")
    print("")
    print(f"User: {settings.default_user_name} ({user_id})")
    print(f"Placed sessions: {result.stats.total_sessions}")
    print(f"Conflicts: {len(result.conflicts)}")
    print(f"Score: {result.score}")
    for day in result.schedule.values():
        for placed in day.sessions:
            marker = " (moved)" if placed.is_alternative or placed.is_different_day else ""
            print(f"  {day.day_name:<9} {placed.start_time}-{placed.end_time}  {placed.course_name}{marker}")


if __name__ == "__main__":
    main()
