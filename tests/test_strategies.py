from datetime import date, datetime
from types import SimpleNamespace

from app.schemas.strategy import HistoryMetrics
from app.utils.strategies import (
    calculate_optimal_amount,
    calculate_required_contribution,
    days_until,
    goal_suggestions,
    milestone_suggestions,
    preferred_weekday,
)


def contribution(amount, day):
    return SimpleNamespace(amount=amount, date=day)


WEEKLY = [
    contribution(1000, date(2024, 1, 1)),
    contribution(1000, date(2024, 1, 8)),
    contribution(1000, date(2024, 1, 15)),
]


def test_nothing_suggested_when_target_met():
    assert calculate_required_contribution(0, 10) == []
    assert calculate_required_contribution(-50, None, WEEKLY) == []


def test_short_deadline_without_history():
    strategies = calculate_required_contribution(1000, 5)

    assert [(s.frequency, s.amount, s.confidence) for s in strategies] == [
        ("per day", 200, 0.9),
        ("per week", 1000, 0.85),
        ("per month", 1000, 0.8),
        ("flexible", 100, 0.6),
    ]
    assert all(s.type == "deadline" for s in strategies[:3])
    assert strategies[-1].type == "general"


def test_long_deadline_only_monthly():
    strategies = calculate_required_contribution(12000, 90)

    assert [s.frequency for s in strategies] == ["per month", "flexible"]
    assert strategies[0].amount == 4000


def test_overdue_deadline_skips_deadline_strategies():
    strategies = calculate_required_contribution(1000, -3)

    assert [s.type for s in strategies] == ["general"]


def test_history_driven_strategies():
    strategies = calculate_required_contribution(5000, None, WEEKLY)

    assert [(s.frequency, s.amount) for s in strategies] == [
        ("every Monday", 1000),
        ("per week", 1000),
        ("monthly (1st-10th)", 1000),
        ("flexible", 500),
    ]
    assert strategies[0].confidence == 1.0


def test_history_amount_capped_at_remaining():
    strategies = calculate_required_contribution(300, None, WEEKLY)

    per_week = next(s for s in strategies if s.frequency == "per week")
    assert per_week.amount == 300


def test_stretch_goal_uses_best_contribution():
    history = [contribution(100, date(2024, 2, 1)), contribution(400, date(2024, 3, 1))]
    strategies = calculate_required_contribution(10000, None, history)

    stretch = next(s for s in strategies if s.frequency == "stretch goal")
    assert stretch.amount == 400
    assert stretch.confidence == 0.7


def test_confidence_never_increases():
    history = WEEKLY + [contribution(3000, date(2024, 1, 20))]
    strategies = calculate_required_contribution(8000, 6, history)

    confidences = [s.confidence for s in strategies]
    assert confidences == sorted(confidences, reverse=True)
    assert all(0 <= c <= 1 for c in confidences)


def test_optimal_amount_follows_recent_trend():
    assert calculate_optimal_amount(HistoryMetrics(average_contribution=1000)) == 1000
    assert calculate_optimal_amount(HistoryMetrics(average_contribution=1000, recent_trend="decreasing")) == 900


def test_preferred_weekday_ties_go_to_lowest_index():
    assert preferred_weekday(HistoryMetrics(weekday_preference={5: 3, 2: 3, 4: 1})) == 2
    assert preferred_weekday(HistoryMetrics()) == 0


def test_days_until_rounds_up():
    now = datetime(2024, 1, 8, 12, 0)
    assert days_until(date(2024, 1, 10), now) == 2
    assert days_until(date(2024, 1, 1), now) == -7
    assert days_until(None, now) is None


def test_milestone_suggestions():
    goal = SimpleNamespace(current_amount=400.0, target_amount=2000.0, deadline=None)
    pending = SimpleNamespace(achieved=False, target_amount=1000.0, deadline=date(2024, 1, 13))
    done = SimpleNamespace(achieved=True, target_amount=300.0, deadline=None)
    now = datetime(2024, 1, 8)

    assert milestone_suggestions(goal, done, [], now) == []

    strategies = milestone_suggestions(goal, pending, [], now)
    assert strategies[0].frequency == "per day"
    assert strategies[0].amount == 120


def test_goal_suggestions_empty_once_reached():
    goal = SimpleNamespace(current_amount=2000.0, target_amount=2000.0, deadline=None)
    assert goal_suggestions(goal, WEEKLY) == []
