from app.services.placement import (
    NO_SLOT_REASON,
    NO_SLOT_SUGGESTIONS,
    PlacementEngine,
    is_well_formed,
)
from app.services.schedule import Conflict, ConstraintRecord, Placement, SessionRecord, WeekSchedule


def make_session(session_id, day=1, start="09:00", end="10:00", session_type="lecture"):
    return SessionRecord(
        id=session_id,
        course_id="c1",
        type=session_type,
        day_of_week=day,
        start_time=start,
        end_time=end,
    )


def place_all(engine, schedule, sessions):
    outcomes = []
    for session in sessions:
        outcome = engine.find_placement(session, schedule)
        if isinstance(outcome, Placement):
            schedule.place(outcome)
        outcomes.append(outcome)
    return outcomes


def test_free_requested_slot_is_used_as_is():
    engine = PlacementEngine([])
    schedule = WeekSchedule()

    outcome = engine.find_placement(make_session("s1", day=1, start="09:00", end="10:30"), schedule)

    assert isinstance(outcome, Placement)
    assert (outcome.day_of_week, outcome.start_time, outcome.end_time) == (1, "09:00", "10:30")
    assert not outcome.is_alternative
    assert not outcome.is_different_day


def test_clash_moves_to_earliest_free_slot_on_same_day():
    engine = PlacementEngine([])
    schedule = WeekSchedule()

    first, second = place_all(engine, schedule, [make_session("s1"), make_session("s2")])

    assert (first.start_time, first.end_time) == ("09:00", "10:00")
    assert second.day_of_week == 1
    assert (second.start_time, second.end_time) == ("08:00", "09:00")
    assert second.is_alternative
    assert not second.is_different_day


def test_back_to_back_is_allowed():
    engine = PlacementEngine([])
    schedule = WeekSchedule()
    place_all(engine, schedule, [make_session("s1", start="09:00", end="10:00")])

    assert engine.is_slot_available(schedule, 1, "10:00", "11:00")
    assert engine.is_slot_available(schedule, 1, "08:00", "09:00")
    assert not engine.is_slot_available(schedule, 1, "09:30", "10:30")


def test_unavailable_window_pushes_session_outside_it():
    constraints = [ConstraintRecord(type="unavailable", day_of_week=None, start_time="12:00", end_time="18:00")]
    engine = PlacementEngine(constraints)

    outcome = engine.find_placement(make_session("s1", day=5, start="12:00", end="14:00"), WeekSchedule())

    assert isinstance(outcome, Placement)
    assert outcome.day_of_week == 5
    assert (outcome.start_time, outcome.end_time) == ("08:00", "10:00")
    assert outcome.is_alternative


def test_day_specific_constraint_only_blocks_its_day():
    constraints = [ConstraintRecord(type="unavailable", day_of_week=2, start_time="09:00", end_time="12:00")]
    engine = PlacementEngine(constraints)
    schedule = WeekSchedule()

    assert not engine.is_slot_available(schedule, 2, "10:00", "11:00")
    assert engine.is_slot_available(schedule, 3, "10:00", "11:00")


def test_open_ended_unavailable_constraints_block_to_the_day_edge():
    constraints = [
        ConstraintRecord(type="unavailable", day_of_week=1, start_time="18:00"),
        ConstraintRecord(type="unavailable", day_of_week=2),
    ]
    engine = PlacementEngine(constraints)
    schedule = WeekSchedule()

    assert not engine.is_slot_available(schedule, 1, "19:00", "20:00")
    assert engine.is_slot_available(schedule, 1, "16:00", "18:00")
    assert not engine.is_slot_available(schedule, 2, "08:00", "09:00")


def test_full_day_falls_back_to_weekdays_in_order():
    # Sunday is blocked entirely, so the session lands on Monday.
    constraints = [ConstraintRecord(type="unavailable", day_of_week=0)]
    engine = PlacementEngine(constraints)

    outcome = engine.find_placement(make_session("s1", day=0, start="10:00", end="12:00"), WeekSchedule())

    assert isinstance(outcome, Placement)
    assert outcome.day_of_week == 1
    assert (outcome.start_time, outcome.end_time) == ("08:00", "10:00")
    assert outcome.is_different_day
    assert not outcome.is_alternative


def test_fallback_skips_the_requested_day():
    constraints = [ConstraintRecord(type="unavailable", day_of_week=1)]
    engine = PlacementEngine(constraints)

    outcome = engine.find_placement(make_session("s1", day=1), WeekSchedule())

    assert outcome.day_of_week == 2
    assert outcome.is_different_day


def test_weekends_are_not_fallback_days():
    # Monday through Friday are unavailable; Saturday is free but never tried.
    constraints = [ConstraintRecord(type="unavailable", day_of_week=day) for day in range(0, 6)]
    engine = PlacementEngine(constraints)

    outcome = engine.find_placement(make_session("s1", day=0), WeekSchedule())

    assert isinstance(outcome, Conflict)
    assert outcome.reason == NO_SLOT_REASON
    assert outcome.suggestions == NO_SLOT_SUGGESTIONS


def test_session_too_long_for_search_window_is_a_conflict():
    constraints = [ConstraintRecord(type="unavailable", day_of_week=None, start_time="07:00", end_time="08:00")]
    engine = PlacementEngine(constraints)

    # 07:00-20:00 overlaps the constraint and no 13 hour block fits between 08:00 and 21:00.
    outcome = engine.find_placement(make_session("s1", day=1, start="07:00", end="20:00"), WeekSchedule())

    assert isinstance(outcome, Conflict)


def test_advisory_constraints_never_block():
    constraints = [
        ConstraintRecord(type="preferred", day_of_week=1, start_time="09:00", end_time="10:00"),
        ConstraintRecord(type="break", day_of_week=1, start_time="09:00", end_time="10:00"),
        ConstraintRecord(type="no_back_to_back", day_of_week=1, start_time="09:00", end_time="10:00"),
    ]
    engine = PlacementEngine(constraints)

    assert engine.blocked_windows == []
    outcome = engine.find_placement(make_session("s1"), WeekSchedule())
    assert (outcome.start_time, outcome.is_alternative) == ("09:00", False)


def test_is_well_formed():
    assert is_well_formed(make_session("ok"))
    assert not is_well_formed(make_session("bad-day", day=7))
    assert not is_well_formed(make_session("no-type", session_type=None))
    assert not is_well_formed(make_session("reversed", start="10:00", end="09:00"))
    assert not is_well_formed(make_session("empty", start="10:00", end="10:00"))
    assert not is_well_formed(make_session("bad-time", start="9am", end="10:00"))
