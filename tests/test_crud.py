from datetime import date, datetime, timedelta

import pytest

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.crud import contribution as crud_contribution
from app.crud import expense as crud_expense
from app.crud import goal as crud_goal
from app.crud import milestone as crud_milestone
from app.crud import notification as crud_notification
from app.crud import preferences as crud_preferences
from app.schemas.contribution import ContributionCreate
from app.schemas.expense import ExpenseCreate
from app.schemas.goal import GoalCreate
from app.schemas.milestone import MilestoneCreate
from app.schemas.notification import NotificationCreate
from app.schemas.preferences import PreferencesUpdate
from app.utils.triggers import evaluate_expense_triggers, evaluate_milestones, sweep_goals

TODAY = date.today()


async def test_initial_amount_is_recorded_as_contribution(db, user):
    goal = await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Laptop", target_amount=2000, current_amount=500), db
    )

    contributions = await crud_contribution.get_contributions(goal.id, db)
    assert goal.current_amount == 500
    assert [(c.amount, c.notes) for c in contributions] == [(500, "Initial deposit")]


async def test_current_amount_tracks_contributions(db, user):
    goal = await crud_goal.create_goal_for_user(user.id, GoalCreate(name="Bike", target_amount=1000), db)
    assert goal.current_amount == 0

    first = await crud_contribution.add_contribution(
        goal.id, ContributionCreate(amount=250, date=TODAY - timedelta(days=3)), db
    )
    await crud_contribution.add_contribution(goal.id, ContributionCreate(amount=100.5, date=TODAY), db)
    assert goal.current_amount == 350.5

    assert await crud_contribution.delete_contribution(goal.id, first.id, db) is True
    assert goal.current_amount == 100.5

    assert await crud_contribution.delete_contribution(goal.id, first.id, db) is False
    assert await crud_contribution.recalculate_current_amount(goal.id, db) == 100.5


async def test_contributions_listed_newest_first(db, user):
    goal = await crud_goal.create_goal_for_user(user.id, GoalCreate(name="Bike", target_amount=1000), db)
    for days_ago in (10, 1, 5):
        await crud_contribution.add_contribution(
            goal.id, ContributionCreate(amount=10, date=TODAY - timedelta(days=days_ago)), db
        )

    contributions = await crud_contribution.get_contributions(goal.id, db)
    assert [c.date for c in contributions] == [TODAY - timedelta(days=d) for d in (1, 5, 10)]


def test_contribution_date_cannot_be_in_future():
    with pytest.raises(ValueError):
        ContributionCreate(amount=10, date=TODAY + timedelta(days=1))


async def test_notification_dedupe(db, user):
    request = NotificationCreate(
        user_id=user.id, title="Goal Achieved! 🎉", message="done", type="goal", dedupe_key="goal-achieved:1"
    )

    first = await crud_notification.create_notification(db, request)
    second = await crud_notification.create_notification(db, request)

    assert first is not None
    assert second is None
    assert await crud_notification.get_unread_count(db, user.id) == 1


async def test_notification_status_transitions(db, user):
    notification = await crud_notification.create_notification(
        db, NotificationCreate(user_id=user.id, title="t", message="m", type="system")
    )
    assert notification.status == "unread"
    assert notification.read_at is None

    notification = await crud_notification.set_notification_status(db, notification, "read")
    assert notification.status == "read"
    assert notification.read_at is not None

    notification = await crud_notification.set_notification_status(db, notification, "archived")
    assert notification.status == "archived"

    with pytest.raises(crud_notification.InvalidStatusTransition):
        await crud_notification.set_notification_status(db, notification, "read")
    with pytest.raises(crud_notification.InvalidStatusTransition):
        await crud_notification.set_notification_status(db, notification, "unread")


async def test_listing_hides_archived_and_mark_all_read(db, user):
    for title in ("a", "b", "c"):
        await crud_notification.create_notification(
            db, NotificationCreate(user_id=user.id, title=title, message="m", type="system")
        )
    notifications = await crud_notification.get_notifications_for_user(db, user.id)
    await crud_notification.set_notification_status(db, notifications[0], "archived")

    assert len(await crud_notification.get_notifications_for_user(db, user.id)) == 2
    assert len(await crud_notification.get_notifications_for_user(db, user.id, include_archived=True)) == 3

    assert await crud_notification.mark_all_notifications_as_read(db, user.id) == 2
    assert await crud_notification.get_unread_count(db, user.id) == 0
    assert await crud_notification.get_notifications_for_user(db, user.id, unread_only=True) == []


async def test_default_preferences_created_once(db, user):
    prefs = await crud_preferences.get_preferences(user.id, db)
    again = await crud_preferences.get_preferences(user.id, db)

    assert prefs.id == again.id
    assert prefs.deadline_days_threshold == 7
    assert prefs.progress_threshold == 20.0
    assert prefs.spending_threshold == 120.0
    assert prefs.notification_types == ["goal", "expense", "system"]

    updated = await crud_preferences.update_preferences(
        user.id, PreferencesUpdate(deadline_days_threshold=3, monthly_spending_alert=False), db
    )
    assert updated.deadline_days_threshold == 3
    assert updated.monthly_spending_alert is False
    assert updated.goal_progress_alert is True


def test_month_start():
    assert crud_expense.month_start(date(2024, 3, 15)) == date(2024, 3, 1)
    assert crud_expense.month_start(date(2024, 1, 15), 1) == date(2023, 12, 1)
    assert crud_expense.month_start(date(2024, 2, 29), 14) == date(2022, 12, 1)


async def test_historical_monthly_average(db, user):
    today = date(2024, 6, 15)
    assert await crud_expense.get_historical_monthly_average(user.id, db, today=today) == \
        settings.DEFAULT_MONTHLY_SPENDING_BASELINE

    for amount, day in [(300, date(2024, 4, 3)), (100, date(2024, 4, 20)), (200, date(2024, 5, 9)),
                        (9999, date(2024, 6, 1)), (9999, date(2023, 12, 1))]:
        await crud_expense.create_expense_for_user(user.id, ExpenseCreate(amount=amount, date=day), db)

    # April 400 and May 200; June is the current month and December is outside the window
    assert await crud_expense.get_historical_monthly_average(user.id, db, today=today) == 300


async def test_milestones_marked_achieved_once(db, user):
    goal = await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Car", target_amount=10000, current_amount=3000), db
    )
    reached = await crud_milestone.create_milestone(goal.id, MilestoneCreate(title="First 2k", target_amount=2000), db)
    await crud_milestone.create_milestone(goal.id, MilestoneCreate(title="Half", target_amount=5000), db)

    created = await evaluate_milestones(db, goal)
    assert [n.dedupe_key for n in created] == [f"milestone-achieved:{reached.id}"]

    await db.refresh(reached)
    assert reached.achieved is True
    first_achieved_at = reached.achieved_at

    assert await evaluate_milestones(db, goal) == []
    await db.refresh(reached)
    assert reached.achieved_at == first_achieved_at


async def test_spending_trigger_uses_monthly_baseline(db, user):
    today = date.today()
    previous = crud_expense.month_start(today, 1)
    await crud_expense.create_expense_for_user(user.id, ExpenseCreate(amount=1000, date=previous), db)
    await crud_expense.create_expense_for_user(
        user.id, ExpenseCreate(amount=1300, date=crud_expense.month_start(today)), db
    )

    created = await evaluate_expense_triggers(db, user.id)
    assert [n.type for n in created] == ["expense"]
    assert await evaluate_expense_triggers(db, user.id) == []


async def test_sweep_notifies_each_goal_once(db, user):
    await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Done", target_amount=100, current_amount=100), db
    )
    await crud_goal.create_goal_for_user(user.id, GoalCreate(name="Open", target_amount=100), db)

    assert await sweep_goals(AsyncSessionLocal) == 1
    assert await sweep_goals(AsyncSessionLocal) == 0


async def test_deleted_notification_is_not_issued_again(db, user):
    request = NotificationCreate(
        user_id=user.id, title="Goal Achieved! 🎉", message="done", type="goal", dedupe_key="goal-achieved:2"
    )
    first = await crud_notification.create_notification(db, request)
    assert await crud_notification.delete_notification(db, first.id, user.id) is True

    assert await crud_notification.create_notification(db, request) is None
    assert await crud_notification.is_key_issued(db, user.id, "goal-achieved:2") is True


async def test_sweep_after_delete_does_not_renotify(db, user):
    await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Done", target_amount=100, current_amount=100), db
    )
    assert await sweep_goals(AsyncSessionLocal) == 1

    [notification] = await crud_notification.get_notifications_for_user(db, user.id)
    assert await crud_notification.delete_notification(db, notification.id, user.id) is True

    assert await sweep_goals(AsyncSessionLocal) == 0
    assert await crud_notification.get_notifications_for_user(db, user.id) == []


async def test_failed_notification_write_does_not_block_the_rest(db, user, monkeypatch):
    goal = await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Car", target_amount=10000, current_amount=3000), db
    )
    first = await crud_milestone.create_milestone(goal.id, MilestoneCreate(title="First 1k", target_amount=1000), db)
    second = await crud_milestone.create_milestone(goal.id, MilestoneCreate(title="First 2k", target_amount=2000), db)
    goal_id, first_id, second_id = goal.id, first.id, second.id

    original = crud_notification.create_notification
    calls = []

    async def fail_first(session, request):
        calls.append(request.dedupe_key)
        if len(calls) == 1:
            raise RuntimeError("notification store unavailable")
        return await original(session, request)

    monkeypatch.setattr(crud_notification, "create_notification", fail_first)

    created = await evaluate_milestones(db, goal)
    assert len(calls) == 2
    assert [n.dedupe_key for n in created] == [calls[1]]
    assert len(await crud_notification.get_notifications_for_user(db, user.id)) == 1

    milestones = {m.id: m for m in await crud_milestone.get_milestones_for_goal(goal_id, db)}
    for milestone in milestones.values():
        await db.refresh(milestone)
    assert milestones[first_id].achieved is True
    assert milestones[second_id].achieved is True


async def test_sweep_skips_goal_that_fails_to_evaluate(db, user, monkeypatch):
    broken = await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Broken", target_amount=100, current_amount=100), db
    )
    await crud_goal.create_goal_for_user(
        user.id, GoalCreate(name="Healthy", target_amount=100, current_amount=100), db
    )
    broken_id = broken.id

    original = crud_milestone.get_milestones_for_goal

    async def fail_for_broken(goal_id, session):
        if goal_id == broken_id:
            raise RuntimeError("corrupt milestone row")
        return await original(goal_id, session)

    monkeypatch.setattr(crud_milestone, "get_milestones_for_goal", fail_for_broken)

    assert await sweep_goals(AsyncSessionLocal) == 1
    [notification] = await crud_notification.get_notifications_for_user(db, user.id)
    assert notification.message.endswith("Healthy")
