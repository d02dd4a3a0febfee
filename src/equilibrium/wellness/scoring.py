"""
Composite wellness scoring.

Four banded sub-scores, 25 points each:

- Sleep: 7–9 h → 25, 6–10 h → 20, 5–11 h → 15, otherwise 10
- Mood: continuous, ``clamp(mood, 0, 5) / 5 * 25``
- Screen time: ≤120 → 25, ≤240 → 20, ≤360 → 15, ≤480 → 10, otherwise 5
- Activity: ≥60 → 25, ≥30 → 20, ≥15 → 15, ≥5 → 10, otherwise 5

The total is rounded half-up, so every score lands in [20, 100].
Out-of-range inputs are clamped (mood) or fall into an outer band.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from equilibrium.health.models import DailyMetrics

MAX_SUB_SCORE = 25.0
MAX_MOOD = 5.0

# (lower_hours, upper_hours, points), checked in order
SLEEP_BANDS = [(7.0, 9.0, 25.0), (6.0, 10.0, 20.0), (5.0, 11.0, 15.0)]
SLEEP_FLOOR = 10.0

# (max_minutes, points)
SCREEN_TIME_BANDS = [(120.0, 25.0), (240.0, 20.0), (360.0, 15.0), (480.0, 10.0)]
SCREEN_TIME_FLOOR = 5.0

# (min_minutes, points)
ACTIVITY_BANDS = [(60.0, 25.0), (30.0, 20.0), (15.0, 15.0), (5.0, 10.0)]
ACTIVITY_FLOOR = 5.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def sleep_sub_score(hours: float) -> float:
    for lower, upper, points in SLEEP_BANDS:
        if lower <= hours <= upper:
            return points
    return SLEEP_FLOOR


def mood_sub_score(mood: float) -> float:
    return min(max(mood, 0.0), MAX_MOOD) / MAX_MOOD * MAX_SUB_SCORE


def screen_time_sub_score(minutes: float) -> float:
    for max_minutes, points in SCREEN_TIME_BANDS:
        if minutes <= max_minutes:
            return points
    return SCREEN_TIME_FLOOR


def activity_sub_score(minutes: float) -> float:
    for min_minutes, points in ACTIVITY_BANDS:
        if minutes >= min_minutes:
            return points
    return ACTIVITY_FLOOR


def sentiment_label(mood: float) -> str:
    """Coarse mood label shared with the backend aggregate."""
    if mood >= 4:
        return "positive"
    if mood >= 3:
        return "neutral"
    return "negative"


@dataclass(frozen=True)
class SubScores:
    sleep: float
    mood: float
    screen_time: float
    activity: float

    @property
    def total(self) -> float:
        return self.sleep + self.mood + self.screen_time + self.activity


class CompositeScorer:
    """Map one day's metrics to an integer wellness score."""

    def sub_scores(self, metrics: DailyMetrics) -> SubScores:
        return SubScores(
            sleep=sleep_sub_score(metrics.sleep_hours),
            mood=mood_sub_score(metrics.mood_score),
            screen_time=screen_time_sub_score(metrics.screen_time_minutes),
            activity=activity_sub_score(metrics.activity_minutes),
        )

    def score(self, metrics: DailyMetrics) -> int:
        return round_half_up(self.sub_scores(metrics).total)
