# app/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid
import logging

from app.schemas.goal import GoalCreate, GoalUpdate, GoalRead
from app.schemas.contribution import ContributionCreate, ContributionRead
from app.schemas.strategy import ContributionStrategy, HistoryMetrics
from app.crud import goal as crud_goal
from app.crud import contribution as crud_contribution
from app.crud import milestone as crud_milestone
from app.core.database import get_async_session
from app.models.goal import SavingsGoal
from app.models.user import User
from app.api.deps import get_current_user
from app.utils.history import analyze_history
from app.utils.strategies import goal_suggestions
from app.utils.triggers import after_goal_change
from app.utils.realtime import manager

router = APIRouter(prefix="/goals", tags=["Goals"])
logger = logging.getLogger(__name__)

async def get_goal_or_404(goal_id: uuid.UUID, user: User, db: AsyncSession) -> SavingsGoal:
    goal = await crud_goal.get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Savings goal not found")
    return goal

@router.get("", response_model=List[GoalRead])
async def read_goals(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await crud_goal.get_goals_for_user(user.id, db)

@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Create a savings goal.

    - **current_amount**: optional starting balance, stored as an "Initial deposit" contribution
    """
    goal = await crud_goal.create_goal_for_user(user.id, goal_in, db)
    logger.info(f"Savings goal {goal.id} created for user {user.id}")

    await after_goal_change(db, goal)
    await db.refresh(goal)
    await manager.push(user.id, "savings_goals", "INSERT", goal)
    return goal

@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_goal_or_404(goal_id, user, db)

@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    if goal_in.target_amount is not None:
        highest_milestone = await crud_milestone.get_highest_milestone_target(goal.id, db)
        if highest_milestone is not None and goal_in.target_amount < highest_milestone:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                detail=f"Goal target cannot be below its largest milestone of {highest_milestone}",
            )
    goal = await crud_goal.update_goal(goal, goal_in, db)

    await after_goal_change(db, goal)
    await db.refresh(goal)
    await manager.push(user.id, "savings_goals", "UPDATE", goal)
    return goal

@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    await crud_goal.delete_goal(goal, db)
    await manager.push(user.id, "savings_goals", "DELETE", {"id": goal_id})
    return None

# ------------------------------------------------------------
# CONTRIBUTIONS
# ------------------------------------------------------------
@router.get("/{goal_id}/contributions", response_model=List[ContributionRead])
async def read_contributions(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    return await crud_contribution.get_contributions(goal.id, db)

@router.post("/{goal_id}/contributions", response_model=ContributionRead, status_code=status.HTTP_201_CREATED)
async def add_contribution(
    goal_id: uuid.UUID,
    contribution_in: ContributionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    contribution = await crud_contribution.add_contribution(goal.id, contribution_in, db)
    await manager.push(user.id, "contributions", "INSERT", contribution)

    await after_goal_change(db, goal)
    await db.refresh(goal)
    await manager.push(user.id, "savings_goals", "UPDATE", goal)
    return contribution

@router.delete("/{goal_id}/contributions/{contribution_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contribution(
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_or_404(goal_id, user, db)
    deleted = await crud_contribution.delete_contribution(goal.id, contribution_id, db)
    if not deleted:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Contribution not found")

    await manager.push(user.id, "contributions", "DELETE", {"id": contribution_id})
    await db.refresh(goal)
    await manager.push(user.id, "savings_goals", "UPDATE", goal)
    return None

# ------------------------------------------------------------
# ANALYTICS
# ------------------------------------------------------------
@router.get("/{goal_id}/history", response_model=HistoryMetrics)
async def read_history_metrics(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Aggregate and pattern statistics over the goal's contributions"""
    goal = await get_goal_or_404(goal_id, user, db)
    history = await crud_contribution.get_contributions(goal.id, db)
    return analyze_history(history)

@router.get("/{goal_id}/suggestions", response_model=List[ContributionStrategy])
async def read_goal_suggestions(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Contribution strategies for reaching the goal, highest confidence first.
    Empty once the goal is reached.
    """
    goal = await get_goal_or_404(goal_id, user, db)
    history = await crud_contribution.get_contributions(goal.id, db)
    return goal_suggestions(goal, history)
