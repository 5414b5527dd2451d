# app/utils/triggers.py
"""
Goal, milestone and spending alerts.

The ``*_triggers`` functions are pure: they look at a snapshot of records and
return the notifications that should exist. The ``evaluate_*`` coroutines
persist those through the notification store; a failed write is logged and
never propagates to the goal/expense operation that triggered it.
"""
import asyncio
import logging
import math
import uuid
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import expense as crud_expense
from app.crud import goal as crud_goal
from app.crud import milestone as crud_milestone
from app.crud import notification as crud_notification
from app.crud import preferences as crud_preferences
from app.models.goal import SavingsGoal
from app.schemas.notification import NotificationCreate
from app.utils.milestones import newly_reached
from app.utils.realtime import manager
from app.utils.strategies import days_until

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────────
# PURE EVALUATION
# ────────────────────────────────────────────────────────────────────────────────
def goal_triggers(goal: Any, preferences: Any, now: Optional[datetime] = None) -> List[NotificationCreate]:
    now = now or datetime.utcnow()
    if not preferences.goal_progress_alert:
        return []

    current = goal.current_amount or 0.0
    if current >= goal.target_amount:
        return [NotificationCreate(
            user_id=goal.user_id,
            title="Goal Achieved! 🎉",
            message=f"Congratulations! You've reached your goal: {goal.name}",
            type="goal",
            priority="high",
            action_url="/savings",
            dedupe_key=f"goal-achieved:{goal.id}",
        )]

    if goal.deadline is None:
        return []

    requests: List[NotificationCreate] = []
    days_left = days_until(goal.deadline, now)

    if preferences.goal_deadline_reminder and 0 < days_left <= preferences.deadline_days_threshold:
        progress = current / goal.target_amount * 100
        requests.append(NotificationCreate(
            user_id=goal.user_id,
            title="Goal Deadline Approaching",
            message=(
                f"{goal.name} deadline is approaching! {days_left} days left. "
                f"Currently at {progress:.1f}%"
            ),
            type="goal",
            priority="high" if days_left <= 3 else "medium",
            action_url="/savings",
            dedupe_key=f"goal-deadline:{goal.id}:{days_left}",
        ))

    if _is_falling_behind(goal, preferences, days_left, now):
        requests.append(NotificationCreate(
            user_id=goal.user_id,
            title="Goal Alert",
            message=f"You're falling behind on {goal.name}",
            type="goal",
            priority="medium",
            action_url="/savings",
            dedupe_key=f"goal-behind:{goal.id}:{now.date().isoformat()}",
        ))

    return requests


def _is_falling_behind(goal: Any, preferences: Any, days_left: int, now: datetime) -> bool:
    created = goal.created_at or now
    deadline_dt = datetime.combine(goal.deadline, datetime.min.time())
    total_days = math.ceil((deadline_dt - created).total_seconds() / 86400)
    if total_days <= 0:
        return False

    elapsed_days = total_days - days_left
    expected_progress = elapsed_days / total_days * 100
    actual_progress = (goal.current_amount or 0.0) / goal.target_amount * 100
    return actual_progress < expected_progress - preferences.progress_threshold


def expense_triggers(
    expenses: Sequence[Any],
    preferences: Any,
    historical_average: float,
    user_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> List[NotificationCreate]:
    now = now or datetime.utcnow()
    if not preferences.monthly_spending_alert or not preferences.spending_threshold:
        return []
    if not historical_average or historical_average <= 0:
        return []

    total_spent = sum(
        float(ex.amount) for ex in expenses
        if ex.date.year == now.year and ex.date.month == now.month
    )
    limit = historical_average * (preferences.spending_threshold / 100)
    if total_spent <= limit:
        return []

    return [NotificationCreate(
        user_id=user_id,
        title="High Monthly Spending",
        message=(
            f"Your spending this month ({total_spent:,.2f}) has exceeded "
            f"{preferences.spending_threshold:g}% of your average"
        ),
        type="expense",
        priority="high",
        action_url="/expenses",
        dedupe_key=f"spending:{now.strftime('%Y-%m')}",
    )]


def milestone_triggers(
    goal: Any,
    milestones: Sequence[Any],
    preferences: Any,
    now: Optional[datetime] = None,
) -> List[NotificationCreate]:
    """Achievement alerts for milestones the goal has just reached, plus
    deadline reminders for the ones still pending."""
    now = now or datetime.utcnow()
    requests: List[NotificationCreate] = []
    reached = newly_reached(goal.current_amount, milestones)

    for milestone in reached:
        requests.append(NotificationCreate(
            user_id=goal.user_id,
            title="Milestone Achieved! 🏆",
            message=f"You've reached {milestone.title} on {goal.name}",
            type="goal",
            priority="high",
            action_url="/savings",
            dedupe_key=f"milestone-achieved:{milestone.id}",
        ))

    if not preferences.goal_deadline_reminder:
        return requests

    for milestone in milestones:
        if milestone.achieved or milestone in reached or milestone.deadline is None:
            continue
        days_left = days_until(milestone.deadline, now)
        if 0 < days_left <= preferences.deadline_days_threshold:
            requests.append(NotificationCreate(
                user_id=goal.user_id,
                title="Milestone Deadline Approaching",
                message=f"{milestone.title} on {goal.name} is due in {days_left} days",
                type="goal",
                priority="high" if days_left <= 3 else "medium",
                action_url="/savings",
                dedupe_key=f"milestone-deadline:{milestone.id}:{days_left}",
            ))

    return requests


# ────────────────────────────────────────────────────────────────────────────────
# PERSISTENCE
# ────────────────────────────────────────────────────────────────────────────────
def enabled_types(requests: Sequence[NotificationCreate], preferences: Any) -> List[NotificationCreate]:
    """Drop requests whose type the user switched off."""
    allowed = preferences.notification_types
    if allowed is None:
        return list(requests)
    return [r for r in requests if r.type in allowed]


async def dispatch(db: AsyncSession, requests: Sequence[NotificationCreate]) -> List[Any]:
    """Store each request and push it to connected clients; failures are logged and skipped."""
    created = []
    for request in requests:
        try:
            notification = await crud_notification.create_notification(db, request)
        except Exception as e:
            logger.error(f"Failed to create notification '{request.title}' for user {request.user_id}: {str(e)}")
            await db.rollback()
            continue
        if notification is None:
            continue
        created.append(notification)
        await manager.push(request.user_id, "notifications", "INSERT", notification)
    return created


async def evaluate_goal_triggers(db: AsyncSession, goal: Any, preferences: Any = None) -> List[Any]:
    try:
        preferences = preferences or await crud_preferences.get_preferences(goal.user_id, db)
    except Exception as e:
        logger.error(f"Could not load notification preferences for user {goal.user_id}: {str(e)}")
        return []
    return await dispatch(db, enabled_types(goal_triggers(goal, preferences), preferences))


async def _reach_milestones(db: AsyncSession, goal: Any, preferences: Any) -> List[NotificationCreate]:
    """Mark milestones the goal has reached as achieved; returns the milestone notifications to send."""
    milestones = await crud_milestone.get_milestones_for_goal(goal.id, db)
    requests = enabled_types(milestone_triggers(goal, milestones, preferences), preferences)

    now = datetime.utcnow()
    for milestone in newly_reached(goal.current_amount, milestones):
        await crud_milestone.mark_milestone_achieved(milestone, db, achieved_at=now)
        logger.info(f"Milestone {milestone.id} of goal {goal.id} achieved")
    return requests


async def evaluate_milestones(db: AsyncSession, goal: Any, preferences: Any = None) -> List[Any]:
    """Mark milestones the goal has reached as achieved, then notify."""
    try:
        preferences = preferences or await crud_preferences.get_preferences(goal.user_id, db)
    except Exception as e:
        logger.error(f"Could not load notification preferences for user {goal.user_id}: {str(e)}")
        return []
    return await dispatch(db, await _reach_milestones(db, goal, preferences))


async def evaluate_expense_triggers(db: AsyncSession, user_id: uuid.UUID, preferences: Any = None) -> List[Any]:
    now = datetime.utcnow()
    try:
        preferences = preferences or await crud_preferences.get_preferences(user_id, db)
        expenses = await crud_expense.get_expenses_for_user(
            user_id, db, start_date=crud_expense.month_start(now.date())
        )
        baseline = await crud_expense.get_historical_monthly_average(user_id, db, today=now.date())
    except Exception as e:
        logger.error(f"Could not load spending data for user {user_id}: {str(e)}")
        return []
    requests = expense_triggers(expenses, preferences, baseline, user_id, now)
    return await dispatch(db, enabled_types(requests, preferences))


async def after_goal_change(db: AsyncSession, goal: Any) -> List[Any]:
    """Run every goal-related evaluation after a goal or its contributions changed."""
    try:
        preferences = await crud_preferences.get_preferences(goal.user_id, db)
    except Exception as e:
        logger.error(f"Could not load notification preferences for user {goal.user_id}: {str(e)}")
        return []

    # All requests are built before the first write: a failed write rolls the
    # session back and expires goal and preferences
    requests = await _reach_milestones(db, goal, preferences)
    requests += enabled_types(goal_triggers(goal, preferences), preferences)
    return await dispatch(db, requests)


# ────────────────────────────────────────────────────────────────────────────────
# PERIODIC SWEEP
# ────────────────────────────────────────────────────────────────────────────────
async def sweep_goals(session_factory: Callable[[], AsyncSession]) -> int:
    """Evaluate every goal once; returns the number of notifications created.

    A goal that fails to evaluate is logged and skipped.
    """
    created = 0
    async with session_factory() as db:
        goal_ids = [goal.id for goal in await crud_goal.get_all_goals(db)]
        for goal_id in goal_ids:
            try:
                goal = await db.get(SavingsGoal, goal_id, populate_existing=True)
                if goal is None:
                    continue
                created += len(await after_goal_change(db, goal))
            except Exception as e:
                logger.error(f"Trigger evaluation failed for goal {goal_id}: {str(e)}")
                await db.rollback()
    logger.info(f"Trigger sweep finished: {len(goal_ids)} goals checked, {created} notifications created")
    return created


async def run_periodic_sweep(session_factory: Callable[[], AsyncSession], interval: Optional[int] = None) -> None:
    interval = interval or settings.TRIGGER_SWEEP_INTERVAL_SECONDS
    while True:
        await asyncio.sleep(interval)
        try:
            await sweep_goals(session_factory)
        except Exception as e:
            logger.error(f"Trigger sweep failed: {str(e)}")
