"""Rule-based reading of free-text planner commands.

The parser only classifies a message and pulls out fields. It never touches
storage; ``app.services.chat`` turns the result into validated records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from app.services.time_slots import DAY_NAMES, minutes_to_time

INTENT_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "add_course": (
        re.compile(r"add.*course", re.IGNORECASE),
        re.compile(r"create.*course", re.IGNORECASE),
        re.compile(r"new.*course", re.IGNORECASE),
        re.compile(r"course.*add", re.IGNORECASE),
    ),
    "schedule_session": (
        re.compile(r"schedule.*class", re.IGNORECASE),
        re.compile(r"add.*session", re.IGNORECASE),
        re.compile(r"\bclass.*\bon\b", re.IGNORECASE),
        re.compile(r"\blab\b.*\bon\b", re.IGNORECASE),
        re.compile(r"\blecture\b.*\bat\b", re.IGNORECASE),
    ),
    "generate_timetable": (
        re.compile(r"generate.*timetable", re.IGNORECASE),
        re.compile(r"create.*schedule", re.IGNORECASE),
        re.compile(r"make.*timetable", re.IGNORECASE),
        re.compile(r"build.*schedule", re.IGNORECASE),
    ),
    "add_constraint": (
        re.compile(r"can'?t.*on", re.IGNORECASE),
        re.compile(r"unavailable.*on", re.IGNORECASE),
        re.compile(r"busy.*on", re.IGNORECASE),
        re.compile(r"no.*class.*after", re.IGNORECASE),
        re.compile(r"break.*between", re.IGNORECASE),
    ),
    "show_schedule": (
        re.compile(r"show.*schedule", re.IGNORECASE),
        re.compile(r"view.*timetable", re.IGNORECASE),
        re.compile(r"what.*today", re.IGNORECASE),
        re.compile(r"schedule.*for", re.IGNORECASE),
    ),
    "modify_session": (
        re.compile(r"change.*time", re.IGNORECASE),
        re.compile(r"move.*class", re.IGNORECASE),
        re.compile(r"reschedule", re.IGNORECASE),
        re.compile(r"update.*session", re.IGNORECASE),
    ),
    "help": (
        re.compile(r"help", re.IGNORECASE),
        re.compile(r"what.*can.*do", re.IGNORECASE),
        re.compile(r"how.*work", re.IGNORECASE),
        re.compile(r"commands", re.IGNORECASE),
    ),
}

DAY_ALIASES = {
    "sun": "Sunday",
    "mon": "Monday",
    "tue": "Tuesday",
    "tues": "Tuesday",
    "wed": "Wednesday",
    "thu": "Thursday",
    "thur": "Thursday",
    "thurs": "Thursday",
    "fri": "Friday",
    "sat": "Saturday",
}
DAY_ALIASES.update({name.lower(): name for name in DAY_NAMES})

PRIORITY_WORDS = {
    "high": 1,
    "important": 1,
    "urgent": 1,
    "medium": 2,
    "normal": 2,
    "low": 3,
}

DAY_PATTERN = re.compile(
    r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday|mon|tues?|wed|thu(?:rs?)?|fri|sat|sun)\b",
    re.IGNORECASE,
)
TIME_PATTERN = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\b", re.IGNORECASE)
RANGE_PATTERN = re.compile(
    r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*(?:to|-|until)\s*(\d{1,2})(?::(\d{2}))?\s*(am|pm)?",
    re.IGNORECASE,
)
SESSION_TYPE_PATTERN = re.compile(r"\b(lecture|lab|tutorial|seminar|class)\b", re.IGNORECASE)
LOCATION_PATTERN = re.compile(r"\b(?i:room|hall|lab|building)\s+([A-Z]*\d[A-Z0-9-]*|[A-Z][A-Z0-9-]*)\b")
PRIORITY_PATTERN = re.compile(r"\b(high|medium|low|important|urgent|normal)\b", re.IGNORECASE)
COURSE_CODE_PATTERN = re.compile(r"\b([A-Z]{2,5}-?\d{2,4}[A-Z]?)\b")
CREDITS_PATTERN = re.compile(r"\b(\d{1,2})\s*credits?\b", re.IGNORECASE)
CAPITALIZED_RUN = re.compile(r"\b[A-Z][A-Za-z0-9+#&.]*(?:\s+[A-Z][A-Za-z0-9+#&.]*)*")
AFTER_PATTERN = re.compile(r"\bafter\b", re.IGNORECASE)
BEFORE_PATTERN = re.compile(r"\bbefore\b", re.IGNORECASE)

# Capitalised words that are never part of a course name.
NAME_STOPWORDS = {
    "add", "create", "new", "schedule", "generate", "make", "build", "show", "view",
    "move", "change", "update", "reschedule", "help", "what", "how", "i", "i'm",
    "my", "a", "an", "the", "please", "course", "class", "lecture", "lab", "tutorial",
    "seminar", "session", "room", "hall", "building", "am", "pm", "on", "at", "no",
    "can't", "cant", "unavailable", "busy", "today", "tomorrow", "called",
}


@dataclass
class ParsedMessage:
    intent: str
    confidence: float
    entities: dict = field(default_factory=dict)
    original_message: str = ""


def normalize_day_name(value: str) -> str:
    return DAY_ALIASES.get(value.strip().lower(), value)


def day_name_to_number(value: str) -> int | None:
    name = normalize_day_name(value)
    if name in DAY_NAMES:
        return DAY_NAMES.index(name)
    return None


def normalize_priority(value: str) -> int:
    return PRIORITY_WORDS.get(value.strip().lower(), 2)


def _to_minutes(hour: str, minute: str | None, period: str | None) -> int | None:
    hours = int(hour)
    minutes = int(minute or 0)
    suffix = (period or "").lower()
    if suffix == "pm" and hours != 12:
        hours += 12
    elif suffix == "am" and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def normalize_time(value: str) -> str | None:
    match = TIME_PATTERN.search(value)
    if not match:
        return None
    minutes = _to_minutes(match.group(1), match.group(2), match.group(3))
    return minutes_to_time(minutes) if minutes is not None else None


def parse_time_range(value: str) -> tuple[str, str] | None:
    """Parse ``2-4 PM`` style ranges.

    A start without am/pm borrows the end's suffix unless that would put it
    after the end (``11-1 pm`` stays 11:00-13:00).
    """
    match = RANGE_PATTERN.search(value)
    if not match:
        return None
    start_hour, start_minute, start_period, end_hour, end_minute, end_period = match.groups()
    end = _to_minutes(end_hour, end_minute, end_period or start_period)
    start = _to_minutes(start_hour, start_minute, start_period or end_period)
    if start is not None and end is not None and start >= end and not start_period:
        start = _to_minutes(start_hour, start_minute, None)
    if start is None or end is None:
        return None
    return minutes_to_time(start), minutes_to_time(end)


def extract_course_name(message: str) -> str | None:
    # Strip locations and day names first so "Room B201" or "Tuesday" never join a name.
    cleaned = LOCATION_PATTERN.sub(" ", message)
    cleaned = DAY_PATTERN.sub(" ", cleaned)
    for run in CAPITALIZED_RUN.findall(cleaned):
        words = [word for word in run.split() if word.lower().strip(".") not in NAME_STOPWORDS]
        words = [word for word in words if not COURSE_CODE_PATTERN.fullmatch(word)]
        if words:
            return " ".join(words)
    return None


def extract_entities(message: str, intent: str) -> dict:
    entities: dict = {}

    course_name = extract_course_name(message)
    if course_name:
        entities["course_name"] = course_name

    code = COURSE_CODE_PATTERN.search(message)
    if code:
        entities["course_code"] = code.group(1)

    credits = CREDITS_PATTERN.search(message)
    if credits:
        entities["credits"] = int(credits.group(1))

    day = DAY_PATTERN.search(message)
    if day:
        entities["day"] = normalize_day_name(day.group(1))

    time_range = parse_time_range(message)
    if time_range:
        entities["start_time"], entities["end_time"] = time_range
    else:
        for match in TIME_PATTERN.finditer(message):
            # A bare number is only a time when it carries am/pm or minutes.
            if match.group(2) or match.group(3):
                single = normalize_time(match.group(0))
                if single:
                    entities["time"] = single
                    break

    session_type = SESSION_TYPE_PATTERN.search(message)
    if session_type:
        entities["session_type"] = session_type.group(1).lower()

    location = LOCATION_PATTERN.search(message)
    if location:
        entities["location"] = location.group(0)

    priority = PRIORITY_PATTERN.search(message)
    if priority:
        entities["priority"] = normalize_priority(priority.group(1))

    if intent == "add_constraint" and "time" in entities:
        if AFTER_PATTERN.search(message):
            entities["start_time"] = entities["time"]
        elif BEFORE_PATTERN.search(message):
            entities["end_time"] = entities["time"]

    return entities


def detect_intent(message: str) -> tuple[str, float]:
    for intent, patterns in INTENT_PATTERNS.items():
        if any(pattern.search(message) for pattern in patterns):
            return intent, 0.8
    return "unknown", 0.0


def analyze_message(message: str) -> ParsedMessage:
    intent, confidence = detect_intent(message)
    return ParsedMessage(
        intent=intent,
        confidence=confidence,
        entities=extract_entities(message, intent),
        original_message=message,
    )
