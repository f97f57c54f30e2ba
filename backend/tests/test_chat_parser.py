import pytest

from app.services.chat_parser import (
    analyze_message,
    day_name_to_number,
    detect_intent,
    normalize_day_name,
    normalize_priority,
    normalize_time,
    parse_time_range,
)


@pytest.mark.parametrize(
    ("message", "intent"),
    [
        ("Add Python Programming course", "add_course"),
        ("Create a new course called Data Structures", "add_course"),
        ("Schedule Python Lab on Tuesday 2-4 PM", "schedule_session"),
        ("Add Math lecture on Mon at 9 AM", "schedule_session"),
        ("Generate my timetable", "generate_timetable"),
        ("I'm unavailable on Friday from 12:00 to 18:00", "add_constraint"),
        ("No classes after 6 PM", "add_constraint"),
        ("Show my schedule for Monday", "show_schedule"),
        ("Please reschedule my lecture", "modify_session"),
        ("help", "help"),
        ("What can you do?", "help"),
        ("The weather is nice", "unknown"),
    ],
)
def test_detect_intent(message, intent):
    assert detect_intent(message)[0] == intent


def test_unknown_intent_has_zero_confidence():
    assert detect_intent("The weather is nice") == ("unknown", 0.0)
    assert detect_intent("help")[1] > 0


def test_schedule_message_entities():
    parsed = analyze_message("Schedule Python Lab on Tuesday 2-4 PM")

    assert parsed.intent == "schedule_session"
    assert parsed.entities["course_name"] == "Python"
    assert parsed.entities["day"] == "Tuesday"
    assert parsed.entities["start_time"] == "14:00"
    assert parsed.entities["end_time"] == "16:00"
    assert parsed.entities["session_type"] == "lab"
    assert "location" not in parsed.entities


def test_location_is_extracted_and_kept_out_of_the_name():
    parsed = analyze_message("Schedule Algorithms lab on Monday 9-11 in Room B201")

    assert parsed.entities["location"] == "Room B201"
    assert parsed.entities["course_name"] == "Algorithms"
    assert (parsed.entities["start_time"], parsed.entities["end_time"]) == ("09:00", "11:00")


def test_single_time_with_day_abbreviation():
    parsed = analyze_message("Add Math lecture on Mon at 9 AM")

    assert parsed.entities["day"] == "Monday"
    assert parsed.entities["time"] == "09:00"
    assert parsed.entities["course_name"] == "Math"
    assert parsed.entities["session_type"] == "lecture"


def test_course_details_are_extracted():
    parsed = analyze_message("Create a new course called Data Structures CS201, high priority")

    assert parsed.intent == "add_course"
    assert parsed.entities["course_name"] == "Data Structures"
    assert parsed.entities["course_code"] == "CS201"
    assert parsed.entities["priority"] == 1


def test_add_course_name():
    assert analyze_message("Add Python Programming course").entities["course_name"] == "Python Programming"


def test_constraint_time_range():
    parsed = analyze_message("I'm unavailable on Friday from 12:00 to 18:00")

    assert parsed.entities["day"] == "Friday"
    assert (parsed.entities["start_time"], parsed.entities["end_time"]) == ("12:00", "18:00")
    assert "course_name" not in parsed.entities


def test_after_sets_the_start_of_an_open_window():
    parsed = analyze_message("No classes after 6 PM")

    assert parsed.entities["start_time"] == "18:00"
    assert "end_time" not in parsed.entities
    assert "session_type" not in parsed.entities


def test_bare_numbers_are_not_times():
    parsed = analyze_message("Add Statistics course with 4 credits")

    assert parsed.entities["credits"] == 4
    assert "time" not in parsed.entities


def test_normalisers():
    assert normalize_day_name("thurs") == "Thursday"
    assert normalize_day_name("FRI") == "Friday"
    assert day_name_to_number("sun") == 0
    assert day_name_to_number("Saturday") == 6
    assert day_name_to_number("someday") is None
    assert normalize_time("2 pm") == "14:00"
    assert normalize_time("12 am") == "00:00"
    assert normalize_time("12:30 pm") == "12:30"
    assert normalize_time("nothing") is None
    assert normalize_priority("urgent") == 1
    assert normalize_priority("low") == 3
    assert normalize_priority("whatever") == 2


def test_time_ranges_borrow_the_suffix():
    assert parse_time_range("2-4 PM") == ("14:00", "16:00")
    assert parse_time_range("11-1 pm") == ("11:00", "13:00")
    assert parse_time_range("9:30 to 11") == ("09:30", "11:00")
    assert parse_time_range("10am until 2pm") == ("10:00", "14:00")
    assert parse_time_range("at noon") is None
