# app/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.goal import SavingsGoal
from app.models.contribution import Contribution
from app.schemas.goal import GoalCreate, GoalUpdate
from app.crud.contribution import recalculate_current_amount
from datetime import date
from typing import List, Optional
import uuid

async def get_goals_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[SavingsGoal]:
    result = await db.execute(
        select(SavingsGoal)
        .where(SavingsGoal.user_id == user_id)
        .order_by(SavingsGoal.created_at.desc())
    )
    return result.scalars().all()

async def get_all_goals(db: AsyncSession) -> List[SavingsGoal]:
    result = await db.execute(select(SavingsGoal))
    return result.scalars().all()

async def get_goal_by_id(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[SavingsGoal]:
    result = await db.execute(
        select(SavingsGoal).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_goal_for_user(user_id: uuid.UUID, goal_in: GoalCreate, db: AsyncSession) -> SavingsGoal:
    data = goal_in.model_dump()
    initial_amount = data.pop("current_amount", 0.0)

    new_goal = SavingsGoal(**data, user_id=user_id, current_amount=0.0)
    db.add(new_goal)
    await db.flush()

    # Starting balance goes in as a contribution so the cached total stays a plain sum
    if initial_amount > 0:
        db.add(Contribution(
            goal_id=new_goal.id,
            amount=initial_amount,
            date=date.today(),
            notes="Initial deposit",
        ))
    await db.commit()

    await recalculate_current_amount(new_goal.id, db)
    await db.refresh(new_goal)
    return new_goal

async def update_goal(goal: SavingsGoal, goal_in: GoalUpdate, db: AsyncSession) -> SavingsGoal:
    for field, value in goal_in.model_dump(exclude_unset=True).items():
        setattr(goal, field, value)
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal

async def delete_goal(goal: SavingsGoal, db: AsyncSession) -> None:
    await db.delete(goal)
    await db.commit()
