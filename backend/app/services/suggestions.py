from __future__ import annotations

from collections.abc import Sequence

from app.services.schedule import ConstraintRecord, WeekSchedule

IMBALANCE_THRESHOLD_HOURS = 3
GAP_THRESHOLD_MINUTES = 120
BACK_TO_BACK_THRESHOLD = 2
WELL_OPTIMIZED = "Your timetable looks well optimized!"


def generate_suggestions(
    schedule: WeekSchedule,
    conflicts: Sequence[object],
    constraints: Sequence[ConstraintRecord] = (),
) -> list[str]:
    suggestions: list[str] = []

    if schedule.imbalance() > IMBALANCE_THRESHOLD_HOURS:
        suggestions.append("Consider redistributing sessions for better daily balance")

    for bucket in schedule:
        if len(bucket.placements) > 1 and any(gap > GAP_THRESHOLD_MINUTES for gap in bucket.gaps()):
            suggestions.append(f"Consider filling large gaps on {bucket.day_name}")

    if conflicts:
        plural = "s" if len(conflicts) > 1 else ""
        suggestions.append(f"Resolve {len(conflicts)} scheduling conflict{plural}")

    for bucket in schedule:
        if bucket.back_to_back_pairs() > BACK_TO_BACK_THRESHOLD:
            suggestions.append(f"Consider adding breaks on {bucket.day_name}")

    return suggestions or [WELL_OPTIMIZED]
