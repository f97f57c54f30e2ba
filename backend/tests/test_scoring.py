import pytest

from app.services.schedule import Conflict, ConstraintRecord, Placement, SessionRecord, WeekSchedule
from app.services.scoring import calculate_score


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


def conflict():
    session = SessionRecord(id="x", course_id="c1", type="lecture", day_of_week=1, start_time="09:00", end_time="10:00")
    return Conflict(session=session, reason="No available time slots found", suggestions=())


def test_empty_schedule_scores_full_marks():
    assert calculate_score(WeekSchedule(), []) == 100


def test_single_session_pays_imbalance_and_earns_daytime_bonus():
    # 1.5 hours on Monday and nothing elsewhere: 100 - 1.5 * 5 + 2.
    schedule = schedule_of(placement(1, "09:00", "10:30"))

    assert calculate_score(schedule, []) == pytest.approx(94.5)


def test_early_start_earns_no_bonus():
    schedule = schedule_of(placement(1, "08:00", "09:00"))

    assert calculate_score(schedule, []) == pytest.approx(95)


def test_each_conflict_costs_twenty_points():
    schedule = WeekSchedule()

    assert calculate_score(schedule, [conflict()]) == 80
    assert calculate_score(schedule, [conflict(), conflict()]) == 60


def test_gap_penalties_stack_for_very_long_gaps():
    two_and_half_hours = schedule_of(placement(1, "09:00", "10:00", "a"), placement(1, "12:30", "13:30", "b"))
    four_hours = schedule_of(placement(1, "09:00", "10:00", "a"), placement(1, "14:00", "15:00", "b"))

    # 2 hours on one day: 100 - 10, two daytime bonuses, then gap penalties.
    assert calculate_score(two_and_half_hours, []) == pytest.approx(100 - 10 - 5 + 4)
    assert calculate_score(four_hours, []) == pytest.approx(100 - 10 - 15 + 4)


def test_gap_of_exactly_two_hours_is_not_penalised():
    schedule = schedule_of(placement(1, "09:00", "10:00", "a"), placement(1, "12:00", "13:00", "b"))

    assert calculate_score(schedule, []) == pytest.approx(100 - 10 + 4)


def test_score_is_clamped():
    busy = schedule_of(placement(1, "08:00", "20:00"))
    assert calculate_score(busy, [conflict()] * 3) == 0

    balanced = schedule_of(*(placement(day, "09:00", "10:00", str(day)) for day in range(7)))
    assert calculate_score(balanced, []) == 100


def test_constraints_do_not_change_the_score():
    schedule = schedule_of(placement(1, "09:00", "10:00"))
    constraints = [
        ConstraintRecord(type="unavailable", day_of_week=1, start_time="09:00", end_time="10:00"),
        ConstraintRecord(type="preferred", day_of_week=2),
        ConstraintRecord(type="no_back_to_back"),
    ]

    assert calculate_score(schedule, [], constraints) == calculate_score(schedule, [])
