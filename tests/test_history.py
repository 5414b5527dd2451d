from datetime import date, datetime
from types import SimpleNamespace

from app.utils.history import (
    analyze_history,
    consistency_score,
    contribution_pattern,
    js_weekday,
    monthly_timing,
    recent_trend,
)


def contribution(amount, day):
    return SimpleNamespace(amount=amount, date=day)


WEEKLY = [
    contribution(1000, date(2024, 1, 1)),   # Monday
    contribution(1000, date(2024, 1, 8)),
    contribution(1000, date(2024, 1, 15)),
]


def test_empty_history_defaults():
    metrics = analyze_history([])

    assert metrics.average_contribution == 0
    assert metrics.highest_contribution == 0
    assert metrics.preferred_frequency == "month"
    assert metrics.contribution_pattern == "irregular"
    assert metrics.weekday_preference == {}
    assert metrics.monthly_timing == "mid"
    assert metrics.average_interval == 30
    assert metrics.consistency_score == 0
    assert metrics.seasonal_pattern == {}
    assert metrics.recent_trend == "stable"


def test_weekly_equal_contributions():
    metrics = analyze_history(WEEKLY)

    assert metrics.average_contribution == 1000
    assert metrics.highest_contribution == 1000
    assert metrics.preferred_frequency == "week"
    assert metrics.contribution_pattern == "consistent"
    assert metrics.weekday_preference == {1: 3}
    assert metrics.monthly_timing == "early"
    assert metrics.average_interval == 7
    assert metrics.consistency_score == 1.0
    assert metrics.seasonal_pattern == {0: 3000}
    assert metrics.recent_trend == "stable"


def test_result_does_not_depend_on_input_order():
    assert analyze_history(list(reversed(WEEKLY))) == analyze_history(WEEKLY)


def test_accepts_iso_strings_and_datetimes():
    rows = [contribution(500, "2024-03-05T10:00:00"), contribution(500, date(2024, 3, 19))]
    metrics = analyze_history(rows)

    assert metrics.average_interval == 14
    assert metrics.preferred_frequency == "fortnight"


def test_single_contribution_uses_month_defaults():
    metrics = analyze_history([contribution(250, date(2024, 5, 25))])

    assert metrics.preferred_frequency == "month"
    assert metrics.average_interval == 30
    assert metrics.monthly_timing == "late"
    assert metrics.recent_trend == "stable"


def test_contribution_pattern():
    assert contribution_pattern([100, 200]) == "irregular"
    assert contribution_pattern([100, 200, 300, 400]) == "increasing"
    assert contribution_pattern([400, 300, 200, 100]) == "decreasing"
    assert contribution_pattern([100, 105, 98, 102]) == "consistent"
    assert contribution_pattern([100, 300, 50, 400]) == "irregular"


def test_recent_trend():
    assert recent_trend([100]) == "stable"
    assert recent_trend([100, 200, 300]) == "increasing"
    assert recent_trend([300, 200, 100]) == "decreasing"
    assert recent_trend([100, 200, 100]) == "stable"


def test_consistency_score_is_clamped():
    assert consistency_score([1, 1000, 5]) == 0.0
    assert 0.0 <= consistency_score([90, 100, 110]) <= 1.0
    assert consistency_score([0, 0]) == 0.0


def test_monthly_timing_ties_go_to_earliest_bucket():
    assert monthly_timing([date(2024, 1, 5), date(2024, 1, 15)]) == "early"
    assert monthly_timing([date(2024, 1, 15), date(2024, 1, 25)]) == "mid"


def test_weekday_index_starts_on_sunday():
    assert js_weekday(date(2024, 1, 7)) == 0   # Sunday
    assert js_weekday(date(2024, 1, 13)) == 6  # Saturday


def test_monthly_equal_contributions():
    metrics = analyze_history([
        contribution(1000, "2024-01-01"),
        contribution(1000, "2024-02-01"),
        contribution(1000, "2024-03-01"),
    ])

    assert metrics.contribution_pattern == "consistent"
    assert metrics.preferred_frequency == "month"
    assert metrics.average_contribution == 1000
    assert metrics.seasonal_pattern == {0: 1000, 1: 1000, 2: 1000}


def test_same_day_contributions_in_any_order():
    first = contribution(100, date(2024, 1, 1))
    small = contribution(100, date(2024, 1, 5))
    large = contribution(300, date(2024, 1, 5))

    assert analyze_history([first, small, large]) == analyze_history([first, large, small])


def test_same_day_contributions_ordered_by_creation_time():
    early = SimpleNamespace(amount=300, date=date(2024, 1, 5), created_at=datetime(2024, 1, 5, 9))
    late = SimpleNamespace(amount=100, date=date(2024, 1, 5), created_at=datetime(2024, 1, 5, 18))
    opening = SimpleNamespace(amount=100, date=date(2024, 1, 1), created_at=datetime(2024, 1, 1, 12))

    metrics = analyze_history([late, opening, early])
    assert metrics == analyze_history([opening, early, late])
    # 100 -> 300 -> 100
    assert metrics.recent_trend == "stable"
