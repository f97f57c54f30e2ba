from __future__ import annotations

from collections.abc import Sequence

from app.services.schedule import ConstraintRecord, WeekSchedule

BASE_SCORE = 100
CONFLICT_PENALTY = 20
IMBALANCE_PENALTY_PER_HOUR = 5
LONG_GAP_MINUTES = 120
LONG_GAP_PENALTY = 5
VERY_LONG_GAP_MINUTES = 180
VERY_LONG_GAP_PENALTY = 10
DAYTIME_FIRST_HOUR = 9
DAYTIME_LAST_HOUR = 17
DAYTIME_BONUS = 2


def calculate_score(
    schedule: WeekSchedule,
    conflicts: Sequence[object],
    constraints: Sequence[ConstraintRecord] = (),
) -> float:
    """Quality score in [0, 100]. No constraint type changes the score."""
    score: float = BASE_SCORE
    score -= len(conflicts) * CONFLICT_PENALTY
    score -= schedule.imbalance() * IMBALANCE_PENALTY_PER_HOUR

    for bucket in schedule:
        if len(bucket.placements) < 2:
            continue
        for gap in bucket.gaps():
            # A gap over three hours takes both penalties.
            if gap > LONG_GAP_MINUTES:
                score -= LONG_GAP_PENALTY
            if gap > VERY_LONG_GAP_MINUTES:
                score -= VERY_LONG_GAP_PENALTY

    for placement in schedule.placements():
        start_hour = placement.start_minutes // 60
        if DAYTIME_FIRST_HOUR <= start_hour <= DAYTIME_LAST_HOUR:
            score += DAYTIME_BONUS

    return max(0, min(BASE_SCORE, score))
