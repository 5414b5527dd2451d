# app/utils/history.py
import math
from datetime import date, datetime
from typing import Any, Dict, List, Sequence

from app.schemas.strategy import HistoryMetrics


# ────────────────────────────────────────────────────────────────────────────────
# MAIN ENTRY
# ────────────────────────────────────────────────────────────────────────────────
def analyze_history(contributions: Sequence[Any]) -> HistoryMetrics:
    """
    Aggregate and pattern statistics over one goal's contributions.

    Accepts anything exposing ``amount`` and ``date`` (ORM rows or schemas).
    Every order-dependent figure is computed on a date-sorted copy, so the
    result does not depend on the order the caller fetched the rows in.
    """
    if not contributions:
        return HistoryMetrics()

    ordered = sorted(contributions, key=_chronological_key)
    amounts = [float(c.amount) for c in ordered]
    dates = [_as_date(c.date) for c in ordered]

    intervals = contribution_intervals(dates)

    return HistoryMetrics(
        average_contribution=sum(amounts) / len(amounts),
        highest_contribution=max(amounts),
        preferred_frequency=preferred_frequency(intervals),
        contribution_pattern=contribution_pattern(amounts),
        weekday_preference=weekday_preference(dates),
        monthly_timing=monthly_timing(dates),
        average_interval=sum(intervals) / len(intervals) if intervals else 30.0,
        consistency_score=consistency_score(amounts),
        seasonal_pattern=seasonal_pattern(dates, amounts),
        recent_trend=recent_trend(amounts[-3:]),
    )


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS
# ────────────────────────────────────────────────────────────────────────────────
def _chronological_key(contribution: Any):
    # same-day rows: creation time, then amount
    created = getattr(contribution, "created_at", None) or datetime.min
    return (_as_date(contribution.date), created, float(contribution.amount))


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def js_weekday(day: date) -> int:
    """Weekday index with Sunday as 0 (Monday=1 … Saturday=6)."""
    return (day.weekday() + 1) % 7


def contribution_intervals(sorted_dates: List[date]) -> List[int]:
    return [(b - a).days for a, b in zip(sorted_dates, sorted_dates[1:])]


def preferred_frequency(intervals: List[int]) -> str:
    if not intervals:
        return "month"

    average_interval = sum(intervals) / len(intervals)
    if average_interval <= 7:
        return "week"
    if average_interval <= 14:
        return "fortnight"
    return "month"


def contribution_pattern(amounts: List[float]) -> str:
    if len(amounts) < 3:
        return "irregular"

    variations = [b - a for a, b in zip(amounts, amounts[1:])]
    needed = len(variations) * 0.7

    steady = sum(1 for v in variations if abs(v) < amounts[0] * 0.1)
    rising = sum(1 for v in variations if v > 0)
    falling = sum(1 for v in variations if v < 0)

    if steady >= needed:
        return "consistent"
    if rising >= needed:
        return "increasing"
    if falling >= needed:
        return "decreasing"
    return "irregular"


def weekday_preference(dates: List[date]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for day in dates:
        index = js_weekday(day)
        counts[index] = counts.get(index, 0) + 1
    return counts


def monthly_timing(dates: List[date]) -> str:
    buckets = {"early": 0, "mid": 0, "late": 0}
    for day in dates:
        if day.day <= 10:
            buckets["early"] += 1
        elif day.day <= 20:
            buckets["mid"] += 1
        else:
            buckets["late"] += 1
    # max() keeps the first of equal counts
    return max(buckets, key=buckets.get)


def consistency_score(amounts: List[float]) -> float:
    if not amounts:
        return 0.0
    mean = sum(amounts) / len(amounts)
    if mean <= 0:
        return 0.0
    variance = sum((a - mean) ** 2 for a in amounts) / len(amounts)
    return min(1.0, max(0.0, 1 - math.sqrt(variance) / mean))


def seasonal_pattern(dates: List[date], amounts: List[float]) -> Dict[int, float]:
    totals: Dict[int, float] = {}
    for day, amount in zip(dates, amounts):
        totals[day.month - 1] = totals.get(day.month - 1, 0.0) + amount
    return totals


def recent_trend(amounts: List[float]) -> str:
    if len(amounts) < 2:
        return "stable"

    changes = [b - a for a, b in zip(amounts, amounts[1:])]
    rising = sum(1 for c in changes if c > 0)
    falling = sum(1 for c in changes if c < 0)

    if rising > falling:
        return "increasing"
    if falling > rising:
        return "decreasing"
    return "stable"
