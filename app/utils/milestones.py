# app/utils/milestones.py
from datetime import datetime
from typing import Any, List, Optional, Sequence

from app.schemas.milestone import MilestoneAnalytics, MilestoneStatus
from app.utils.strategies import days_until


def milestone_progress(current_amount: float, milestone_amount: float) -> float:
    """Percent of the milestone reached, capped at 100."""
    if milestone_amount <= 0:
        return 100.0
    return min((current_amount or 0.0) / milestone_amount * 100, 100.0)


def milestone_status(current_amount: float, milestone: Any, now: Optional[datetime] = None) -> MilestoneStatus:
    """
    Classify a milestone as completed, overdue, urgent (7 days or less left)
    or in-progress.
    """
    now = now or datetime.utcnow()
    progress = milestone_progress(current_amount, milestone.target_amount)

    if milestone.achieved or progress >= 100:
        return MilestoneStatus(milestone_id=milestone.id, status="completed", progress=progress)

    if milestone.deadline is None:
        return MilestoneStatus(milestone_id=milestone.id, status="in-progress", progress=progress)

    days_remaining = days_until(milestone.deadline, now)
    if days_remaining < 0:
        return MilestoneStatus(milestone_id=milestone.id, status="overdue", progress=progress)

    return MilestoneStatus(
        milestone_id=milestone.id,
        status="urgent" if days_remaining <= 7 else "in-progress",
        progress=progress,
        days_remaining=days_remaining,
    )


def newly_reached(current_amount: float, milestones: Sequence[Any]) -> List[Any]:
    """Milestones not yet marked achieved whose target the goal has reached."""
    return [
        m for m in sorted(milestones, key=lambda m: m.target_amount)
        if not m.achieved and (current_amount or 0.0) >= m.target_amount
    ]


def milestone_analytics(
    current_amount: float,
    milestones: Sequence[Any],
    now: Optional[datetime] = None,
) -> MilestoneAnalytics:
    achieved = [m for m in milestones if m.achieved]
    total = len(milestones)

    average_days = None
    if achieved:
        completion_days = [(m.achieved_at - m.created_at).days for m in achieved]
        average_days = round(sum(completion_days) / len(completion_days))

    return MilestoneAnalytics(
        total=total,
        achieved=len(achieved),
        pending=total - len(achieved),
        completion_rate=(len(achieved) / total * 100) if total else 0.0,
        average_completion_days=average_days,
        statuses=[
            milestone_status(current_amount, m, now)
            for m in sorted(milestones, key=lambda m: m.target_amount)
        ],
    )
