# app/crud/milestone.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.models.milestone import Milestone
from app.schemas.milestone import MilestoneCreate, MilestoneUpdate
from datetime import datetime
from typing import List, Optional
import uuid

async def get_milestones_for_goal(goal_id: uuid.UUID, db: AsyncSession) -> List[Milestone]:
    result = await db.execute(
        select(Milestone)
        .where(Milestone.goal_id == goal_id)
        .order_by(Milestone.target_amount)
    )
    return result.scalars().all()

async def get_highest_milestone_target(goal_id: uuid.UUID, db: AsyncSession) -> Optional[float]:
    result = await db.execute(
        select(func.max(Milestone.target_amount)).where(Milestone.goal_id == goal_id)
    )
    return result.scalar_one_or_none()

async def get_milestone_by_id(milestone_id: uuid.UUID, goal_id: uuid.UUID, db: AsyncSession) -> Optional[Milestone]:
    result = await db.execute(
        select(Milestone).where(Milestone.id == milestone_id, Milestone.goal_id == goal_id)
    )
    return result.scalar_one_or_none()

async def create_milestone(goal_id: uuid.UUID, milestone_in: MilestoneCreate, db: AsyncSession) -> Milestone:
    milestone = Milestone(**milestone_in.model_dump(), goal_id=goal_id)
    db.add(milestone)
    await db.commit()
    await db.refresh(milestone)
    return milestone

async def update_milestone(milestone: Milestone, milestone_in: MilestoneUpdate, db: AsyncSession) -> Milestone:
    for field, value in milestone_in.model_dump(exclude_unset=True).items():
        setattr(milestone, field, value)
    db.add(milestone)
    await db.commit()
    await db.refresh(milestone)
    return milestone

async def delete_milestone(milestone: Milestone, db: AsyncSession) -> None:
    await db.delete(milestone)
    await db.commit()

async def mark_milestone_achieved(milestone: Milestone, db: AsyncSession, achieved_at: Optional[datetime] = None) -> Milestone:
    """Flip a milestone to achieved; an already achieved milestone keeps its timestamp"""
    if milestone.achieved:
        return milestone
    milestone.achieved = True
    milestone.achieved_at = achieved_at or datetime.utcnow()
    db.add(milestone)
    await db.commit()
    await db.refresh(milestone)
    return milestone
