# app/crud/contribution.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from app.models.contribution import Contribution
from app.models.goal import SavingsGoal
from app.schemas.contribution import ContributionCreate
from app.core.db_utils import with_db_retry
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)

async def get_contributions(goal_id: uuid.UUID, db: AsyncSession) -> List[Contribution]:
    """Contributions of a goal, newest first"""
    result = await db.execute(
        select(Contribution)
        .where(Contribution.goal_id == goal_id)
        .order_by(Contribution.date.desc(), Contribution.created_at.desc())
    )
    return result.scalars().all()

async def add_contribution(goal_id: uuid.UUID, contribution_in: ContributionCreate, db: AsyncSession) -> Contribution:
    """Insert a contribution and refresh the goal's cached total"""
    contribution = Contribution(**contribution_in.model_dump(), goal_id=goal_id)
    db.add(contribution)
    await db.commit()
    await db.refresh(contribution)

    await recalculate_current_amount(goal_id, db)
    return contribution

async def delete_contribution(goal_id: uuid.UUID, contribution_id: uuid.UUID, db: AsyncSession) -> bool:
    """Delete a contribution belonging to the goal; returns False if there was none"""
    result = await db.execute(
        delete(Contribution)
        .where(Contribution.id == contribution_id, Contribution.goal_id == goal_id)
    )
    await db.commit()
    if result.rowcount == 0:
        return False

    await recalculate_current_amount(goal_id, db)
    return True

@with_db_retry()
async def recalculate_current_amount(goal_id: uuid.UUID, db: AsyncSession) -> float:
    """
    Recompute ``current_amount`` from the contribution rows in a single
    UPDATE ... SET current_amount = (SELECT SUM ...) statement, so concurrent
    add/delete calls can never leave a stale total behind.
    """
    total = (
        select(func.coalesce(func.sum(Contribution.amount), 0.0))
        .where(Contribution.goal_id == goal_id)
        .scalar_subquery()
    )
    await db.execute(
        update(SavingsGoal)
        .where(SavingsGoal.id == goal_id)
        .values(current_amount=total)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    # Reload the goal so instances already in the session see the new total
    goal = await db.get(SavingsGoal, goal_id, populate_existing=True)
    new_total = goal.current_amount if goal else 0.0
    logger.debug(f"Goal {goal_id} current amount recalculated to {new_total}")
    return new_total
