"""
Trend and pattern analysis for user-facing insights.

Informational only: nothing here gates alerts.  All functions take a
newest-first history and never raise on short or empty input.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Sequence

from equilibrium.health.models import (
    DailyWellnessRecord,
    DataCompleteness,
    Insight,
    InsightType,
    OverviewStats,
    Pattern,
    PatternType,
    Trend,
    TrendSummary,
    WellnessReport,
)

from .scoring import round_half_up

MIN_TREND_DAYS = 7
MIN_WEEKLY_PATTERN_DAYS = 14
MIN_USAGE_PAIRED_DAYS = 5

WELLNESS_TREND_THRESHOLD = 5.0
MOOD_TREND_THRESHOLD = 0.5
SLEEP_TREND_THRESHOLD = 0.5
USAGE_WELLNESS_GAP = 10.0

COMPLETENESS_WELLNESS_DAYS = 30
COMPLETENESS_USAGE_DAYS = 7


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def classify_trend(recent: Sequence[float], older: Sequence[float], threshold: float) -> Trend:
    """Compare two windows of values; an empty window means no trend."""
    if not recent or not older:
        return Trend.STABLE
    difference = _mean(recent) - _mean(older)
    if difference > threshold:
        return Trend.IMPROVING
    if difference < -threshold:
        return Trend.DECLINING
    return Trend.STABLE


class TrendAndPatternAnalyzer:
    """Summarize a score history as trend labels and pattern descriptors."""

    def analyze(self, history: Sequence[DailyWellnessRecord]) -> TrendSummary:
        if len(history) < MIN_TREND_DAYS:
            return TrendSummary()

        recent = history[:MIN_TREND_DAYS]
        older = history[MIN_TREND_DAYS : 2 * MIN_TREND_DAYS]

        recent_scores = [r.wellness_score for r in recent]
        older_scores = [r.wellness_score for r in older]
        strength = abs(_mean(recent_scores) - _mean(older_scores)) if older_scores else 0.0

        return TrendSummary(
            wellness_trend=classify_trend(recent_scores, older_scores, WELLNESS_TREND_THRESHOLD),
            mood_trend=classify_trend(
                [r.mood_score for r in recent], [r.mood_score for r in older], MOOD_TREND_THRESHOLD
            ),
            sleep_trend=classify_trend(
                [r.sleep_hours for r in recent], [r.sleep_hours for r in older], SLEEP_TREND_THRESHOLD
            ),
            trend_strength=round_half_up(strength),
            patterns=self.patterns(history),
        )

    def patterns(self, history: Sequence[DailyWellnessRecord]) -> list[Pattern]:
        found = []
        if len(history) >= MIN_WEEKLY_PATTERN_DAYS:
            found.append(self.weekly_pattern(history))
        usage = self.usage_pattern(history)
        if usage is not None:
            found.append(usage)
        return found

    @staticmethod
    def weekly_pattern(history: Sequence[DailyWellnessRecord]) -> Pattern:
        """Best and worst weekday by mean score.  Ties go to the earlier weekday."""
        by_weekday: dict[int, list[int]] = defaultdict(list)
        for record in history:
            by_weekday[record.date.weekday()].append(record.wellness_score)

        averages = {day: _mean(scores) for day, scores in sorted(by_weekday.items())}
        best = calendar.day_name[max(averages, key=averages.__getitem__)]
        worst = calendar.day_name[min(averages, key=averages.__getitem__)]

        return Pattern(
            type=PatternType.WEEKLY,
            title="Weekly Pattern",
            message=f"Your wellness tends to be highest on {best} and lowest on {worst}",
            best_day=best,
            worst_day=worst,
        )

    @staticmethod
    def usage_pattern(history: Sequence[DailyWellnessRecord]) -> Pattern | None:
        """Report a negative screen-time / wellness correlation, if there is one."""
        paired = [r for r in history if r.has_usage_data and r.wellness_score > 0]
        if len(paired) < MIN_USAGE_PAIRED_DAYS:
            return None

        avg_screen = _mean([r.screen_time_minutes for r in paired])
        high = [r.wellness_score for r in paired if r.screen_time_minutes > avg_screen]
        low = [r.wellness_score for r in paired if r.screen_time_minutes <= avg_screen]
        if not high or not low:
            return None

        if _mean(low) > _mean(high) + USAGE_WELLNESS_GAP:
            return Pattern(
                type=PatternType.USAGE,
                title="Screen Time Impact",
                message="Your wellness scores tend to be higher on days with less screen time",
                correlation="negative",
            )
        return None


# ── Report helpers ───────────────────────────────────────────────────


def current_streak(history: Sequence[DailyWellnessRecord]) -> int:
    """Consecutive most-recent days with a positive score."""
    streak = 0
    for record in history:
        if record.wellness_score <= 0:
            break
        streak += 1
    return streak


def overview(history: Sequence[DailyWellnessRecord]) -> OverviewStats:
    valid = [r for r in history if r.wellness_score > 0]
    if not valid:
        return OverviewStats(current_streak=current_streak(history))

    return OverviewStats(
        avg_wellness_score=round_half_up(_mean([r.wellness_score for r in valid])),
        avg_mood_score=round(_mean([r.mood_score for r in valid]), 1),
        avg_sleep_hours=round(_mean([r.sleep_hours for r in valid]), 1),
        total_days_tracked=len(valid),
        current_streak=current_streak(history),
    )


def half_split_trend(scores: Sequence[float]) -> Trend:
    """Relative change between the two halves of a score list (±10%)."""
    if len(scores) < 3:
        return Trend.STABLE
    middle = len(scores) // 2
    first_avg, second_avg = _mean(scores[:middle]), _mean(scores[middle:])
    if first_avg == 0:
        return Trend.STABLE
    change = (second_avg - first_avg) / first_avg * 100.0
    if change > 10:
        return Trend.IMPROVING
    if change < -10:
        return Trend.DECLINING
    return Trend.STABLE


def insights(history: Sequence[DailyWellnessRecord]) -> list[Insight]:
    found: list[Insight] = []
    if not history:
        return found

    avg_score = _mean([r.wellness_score for r in history])
    if avg_score > 80:
        found.append(
            Insight(InsightType.POSITIVE, "Excellent Wellness", "Your wellness scores have been consistently high!")
        )
    elif avg_score < 50:
        found.append(
            Insight(
                InsightType.CONCERN,
                "Wellness Attention Needed",
                "Your wellness scores suggest you might benefit from additional support.",
            )
        )
    if avg_score < 60:
        found.append(
            Insight(
                InsightType.WELLNESS_LOW,
                "Wellness Score Below Average",
                f"Your average wellness score is {round_half_up(avg_score)}",
            )
        )

    # Oldest first, so "second half" means the more recent days
    chronological = [r.wellness_score for r in reversed(history)]
    if half_split_trend(chronological) == Trend.IMPROVING:
        found.append(
            Insight(
                InsightType.WELLNESS_IMPROVING, "Wellness Improving", "Your wellness score has been trending upward"
            )
        )

    usage = [r.screen_time_hours for r in history if r.has_usage_data]
    if usage and _mean(usage) > 6:
        found.append(
            Insight(
                InsightType.WARNING,
                "High Screen Time",
                f"You're averaging {_mean(usage):.1f} hours of screen time daily.",
            )
        )
    return found


def recommendations(history: Sequence[DailyWellnessRecord]) -> list[str]:
    if not history:
        return ["Start tracking your daily wellness metrics for personalized insights"]

    found = []
    recent = history[:MIN_TREND_DAYS]
    if _mean([r.mood_score for r in recent]) < 3:
        found.append("Consider talking to a mental health professional or trusted friend")
    if _mean([r.sleep_hours for r in recent]) < 7:
        found.append("Try to get 7-9 hours of sleep each night for better mental health")

    usage = [r.screen_time_hours for r in history if r.has_usage_data]
    if usage and _mean(usage) > 5:
        found.append("Consider reducing screen time with regular digital breaks")

    found.append("Continue your wellness tracking for better insights over time")
    return found


def data_completeness(history: Sequence[DailyWellnessRecord], usage_enabled: bool) -> DataCompleteness:
    wellness = min(len(history) / COMPLETENESS_WELLNESS_DAYS * 100.0, 100.0)
    usage = 0.0
    if usage_enabled:
        usage_days = sum(1 for r in history[:COMPLETENESS_USAGE_DAYS] if r.has_usage_data)
        usage = min(usage_days / COMPLETENESS_USAGE_DAYS * 100.0, 100.0)
    return DataCompleteness(
        overall=round_half_up((wellness + usage) / 2),
        wellness=round_half_up(wellness),
        usage=round_half_up(usage),
    )


def build_report(
    history: Sequence[DailyWellnessRecord],
    usage_enabled: bool,
    analyzer: TrendAndPatternAnalyzer | None = None,
) -> WellnessReport:
    analyzer = analyzer or TrendAndPatternAnalyzer()
    return WellnessReport(
        trends=analyzer.analyze(history),
        overview=overview(history),
        insights=insights(history),
        recommendations=recommendations(history),
        completeness=data_completeness(history, usage_enabled),
    )
