# app/utils/strategies.py
import math
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

from app.schemas.strategy import ContributionStrategy, HistoryMetrics
from app.utils.history import analyze_history

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

TIMING_RANGES = {
    "early": "1st-10th",
    "mid": "11th-20th",
    "late": "21st-31st",
}


def calculate_required_contribution(
    remaining_amount: float,
    days_remaining: Optional[int],
    history: Sequence[Any] = (),
) -> List[ContributionStrategy]:
    """
    Ranked contribution strategies for closing ``remaining_amount``.

    Strategies are sorted by confidence, highest first; equal confidences keep
    the order they were generated in. Nothing is suggested once the target is
    already met.
    """
    if remaining_amount <= 0:
        return []

    patterns = analyze_history(history)
    strategies: List[ContributionStrategy] = []

    # Established weekday habit
    if patterns.consistency_score > 0.7:
        weekday = preferred_weekday(patterns)
        strategies.append(ContributionStrategy(
            amount=patterns.average_contribution,
            frequency=f"every {WEEKDAY_NAMES[weekday]}",
            type="smart",
            confidence=patterns.consistency_score,
            description="Based on your consistent contribution pattern",
        ))

    if history:
        strategies.append(ContributionStrategy(
            amount=calculate_optimal_amount(patterns),
            frequency=f"monthly ({TIMING_RANGES[patterns.monthly_timing]})",
            type="smart",
            confidence=0.85,
            description="Aligned with your preferred contribution timing",
        ))

    # Deadline driven; an overdue deadline leaves nothing to divide by
    if days_remaining is not None and days_remaining > 0:
        if days_remaining <= 7:
            strategies.append(ContributionStrategy(
                amount=math.ceil(remaining_amount / days_remaining),
                frequency="per day",
                type="deadline",
                confidence=0.9,
                description="Based on upcoming deadline",
            ))

        if days_remaining <= 30:
            weeks_remaining = math.ceil(days_remaining / 7)
            strategies.append(ContributionStrategy(
                amount=math.ceil(remaining_amount / weeks_remaining),
                frequency="per week",
                type="deadline",
                confidence=0.85,
                description="Weekly contributions to meet deadline",
            ))

        months_remaining = math.ceil(days_remaining / 30)
        strategies.append(ContributionStrategy(
            amount=math.ceil(remaining_amount / months_remaining),
            frequency="per month",
            type="deadline",
            confidence=0.8,
            description="Monthly contributions to meet deadline",
        ))

    if patterns.average_contribution > 0:
        strategies.append(ContributionStrategy(
            amount=min(patterns.average_contribution, remaining_amount),
            frequency=f"per {patterns.preferred_frequency}",
            type="smart",
            confidence=0.95,
            description="Based on your contribution history",
        ))

        if patterns.highest_contribution > patterns.average_contribution:
            strategies.append(ContributionStrategy(
                amount=min(patterns.highest_contribution, remaining_amount),
                frequency="stretch goal",
                type="smart",
                confidence=0.7,
                description="Ambitious goal based on your best contribution",
            ))

    strategies.append(ContributionStrategy(
        amount=math.ceil(remaining_amount / 10),
        frequency="flexible",
        type="general",
        confidence=0.6,
        description="10 equal contributions",
    ))

    # sorted() is stable
    return sorted(strategies, key=lambda s: s.confidence, reverse=True)


def calculate_optimal_amount(patterns: HistoryMetrics) -> int:
    """Average contribution nudged by the recent trend."""
    if patterns.recent_trend == "increasing":
        adjustment_factor = 1.1
    elif patterns.recent_trend == "decreasing":
        adjustment_factor = 0.9
    else:
        adjustment_factor = 1.0
    return math.ceil(patterns.average_contribution * adjustment_factor)


def preferred_weekday(patterns: HistoryMetrics) -> int:
    """Most frequent contribution weekday; ties go to the earliest index."""
    best_day, best_count = 0, -1
    for day in range(7):
        count = patterns.weekday_preference.get(day, 0)
        if count > best_count:
            best_day, best_count = day, count
    return best_day


def days_until(deadline: Optional[date], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days left until ``deadline`` (rounded up), or None without a deadline."""
    if deadline is None:
        return None
    now = now or datetime.utcnow()
    deadline_dt = datetime.combine(deadline, datetime.min.time())
    return math.ceil((deadline_dt - now).total_seconds() / 86400)


def milestone_suggestions(
    goal: Any,
    milestone: Any,
    history: Sequence[Any],
    now: Optional[datetime] = None,
) -> List[ContributionStrategy]:
    """Strategies for reaching one milestone from the goal's current amount."""
    if milestone.achieved:
        return []

    remaining = milestone.target_amount - (goal.current_amount or 0.0)
    return calculate_required_contribution(
        remaining,
        days_until(milestone.deadline, now),
        history,
    )


def goal_suggestions(
    goal: Any,
    history: Sequence[Any],
    now: Optional[datetime] = None,
) -> List[ContributionStrategy]:
    """Strategies for reaching the goal's own target."""
    remaining = goal.target_amount - (goal.current_amount or 0.0)
    return calculate_required_contribution(
        remaining,
        days_until(goal.deadline, now),
        history,
    )
