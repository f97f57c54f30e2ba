from app.services.schedule import Conflict, Placement, SessionRecord, WeekSchedule
from app.services.suggestions import WELL_OPTIMIZED, generate_suggestions


def placement(day, start, end, session_id="s"):
    session = SessionRecord(
        id=session_id,
        course_id="c1",
        type="lecture",
        day_of_week=day,
        start_time=start,
        end_time=end,
    )
    return Placement(session=session, day_of_week=day, start_time=start, end_time=end)


def schedule_of(*placements):
    schedule = WeekSchedule()
    for item in placements:
        schedule.place(item)
    return schedule


def conflict(session_id="x"):
    session = SessionRecord(
        id=session_id, course_id="c1", type="lecture", day_of_week=1, start_time="09:00", end_time="10:00"
    )
    return Conflict(session=session, reason="No available time slots found", suggestions=())


def test_balanced_schedule_is_well_optimized():
    schedule = schedule_of(placement(1, "09:00", "10:00"))

    assert generate_suggestions(schedule, []) == [WELL_OPTIMIZED]


def test_heavy_day_triggers_redistribution():
    schedule = schedule_of(placement(1, "09:00", "13:00"))

    assert generate_suggestions(schedule, []) == ["Consider redistributing sessions for better daily balance"]


def test_large_gap_names_the_day():
    schedule = schedule_of(placement(3, "09:00", "10:00", "a"), placement(3, "13:00", "14:00", "b"))

    assert generate_suggestions(schedule, []) == ["Consider filling large gaps on Wednesday"]


def test_conflict_count_is_pluralised():
    schedule = WeekSchedule()

    assert generate_suggestions(schedule, [conflict()]) == ["Resolve 1 scheduling conflict"]
    assert generate_suggestions(schedule, [conflict("a"), conflict("b")]) == ["Resolve 2 scheduling conflicts"]


def test_many_back_to_back_sessions_suggest_breaks():
    schedule = schedule_of(
        placement(2, "08:00", "08:30", "a"),
        placement(2, "08:30", "09:00", "b"),
        placement(2, "09:00", "09:30", "c"),
        placement(2, "09:30", "10:00", "d"),
    )

    assert generate_suggestions(schedule, []) == ["Consider adding breaks on Tuesday"]


def test_two_back_to_back_pairs_are_fine():
    schedule = schedule_of(
        placement(2, "08:00", "08:30", "a"),
        placement(2, "08:30", "09:00", "b"),
        placement(2, "09:00", "09:30", "c"),
    )

    assert generate_suggestions(schedule, []) == [WELL_OPTIMIZED]


def test_suggestions_follow_rule_order():
    schedule = schedule_of(
        placement(1, "08:00", "10:00", "a"),
        placement(1, "14:00", "16:00", "b"),
    )

    assert generate_suggestions(schedule, [conflict()]) == [
        "Consider redistributing sessions for better daily balance",
        "Consider filling large gaps on Monday",
        "Resolve 1 scheduling conflict",
    ]
