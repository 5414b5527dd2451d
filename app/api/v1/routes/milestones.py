# app/api/v1/routes/milestones.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from app.schemas.milestone import MilestoneCreate, MilestoneUpdate, MilestoneRead, MilestoneAnalytics
from app.schemas.strategy import ContributionStrategy
from app.crud import milestone as crud_milestone
from app.crud import contribution as crud_contribution
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_user
from app.api.v1.routes.goals import get_goal_or_404
from app.utils.milestones import milestone_analytics
from app.utils.strategies import milestone_suggestions
from app.utils.triggers import evaluate_milestones

router = APIRouter(prefix="/goals/{goal_id}/milestones", tags=["Milestones"])

@router.get("", response_model=List[MilestoneRead])
async def read_milestones(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    return await crud_milestone.get_milestones_for_goal(goal.id, db)

@router.post("", response_model=MilestoneRead, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    goal_id: uuid.UUID,
    milestone_in: MilestoneCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    if milestone_in.target_amount > goal.target_amount:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail=f"Milestone target cannot exceed goal amount of {goal.target_amount}",
        )
    milestone = await crud_milestone.create_milestone(goal.id, milestone_in, db)

    # A milestone at or below the current balance is reached immediately
    await evaluate_milestones(db, goal)
    await db.refresh(milestone)
    return milestone

@router.get("/analytics", response_model=MilestoneAnalytics)
async def read_milestone_analytics(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Completion rate, average days to completion and per-milestone status"""
    goal = await get_goal_or_404(goal_id, user, db)
    milestones = await crud_milestone.get_milestones_for_goal(goal.id, db)
    return milestone_analytics(goal.current_amount, milestones)

@router.patch("/{milestone_id}", response_model=MilestoneRead)
async def update_milestone(
    goal_id: uuid.UUID,
    milestone_id: uuid.UUID,
    milestone_in: MilestoneUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    milestone = await crud_milestone.get_milestone_by_id(milestone_id, goal.id, db)
    if not milestone:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Milestone not found")
    if milestone_in.target_amount is not None and milestone_in.target_amount > goal.target_amount:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail=f"Milestone target cannot exceed goal amount of {goal.target_amount}",
        )

    milestone = await crud_milestone.update_milestone(milestone, milestone_in, db)
    await evaluate_milestones(db, goal)
    await db.refresh(milestone)
    return milestone

@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(
    goal_id: uuid.UUID,
    milestone_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    milestone = await crud_milestone.get_milestone_by_id(milestone_id, goal.id, db)
    if not milestone:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Milestone not found")
    await crud_milestone.delete_milestone(milestone, db)
    return None

@router.get("/{milestone_id}/suggestions", response_model=List[ContributionStrategy])
async def read_milestone_suggestions(
    goal_id: uuid.UUID,
    milestone_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Contribution strategies for reaching the milestone; empty once it is achieved or covered"""
    goal = await get_goal_or_404(goal_id, user, db)
    milestone = await crud_milestone.get_milestone_by_id(milestone_id, goal.id, db)
    if not milestone:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Milestone not found")
    history = await crud_contribution.get_contributions(goal.id, db)
    return milestone_suggestions(goal, milestone, history)
