# app/crud/expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.expense import Expense
from app.core.config import settings
from typing import Dict, List, Optional
from datetime import date
import uuid
from app.schemas.expense import ExpenseCreate, ExpenseUpdate

async def get_expenses_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[uuid.UUID] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[Expense]:
    query = select(Expense).where(Expense.user_id == user_id)
    if start_date:
        query = query.where(Expense.date >= start_date)
    if end_date:
        query = query.where(Expense.date <= end_date)
    if category_id:
        query = query.where(Expense.category_id == category_id)

    query = query.order_by(Expense.date.desc(), Expense.created_at.desc()).offset(offset)
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    return result.unique().scalars().all()

async def get_expense_by_id(expense_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Expense]:
    result = await db.execute(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
    )
    return result.unique().scalar_one_or_none()

async def create_expense_for_user(user_id: uuid.UUID, ex_in: ExpenseCreate, db: AsyncSession) -> Expense:
    new_ex = Expense(**ex_in.model_dump(), user_id=user_id)
    db.add(new_ex)
    await db.commit()
    await db.refresh(new_ex)
    return new_ex

async def update_expense(expense: Expense, ex_in: ExpenseUpdate, db: AsyncSession) -> Expense:
    for field, value in ex_in.model_dump(exclude_unset=True).items():
        setattr(expense, field, value)
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    return expense

async def delete_expense(expense: Expense, db: AsyncSession) -> None:
    await db.delete(expense)
    await db.commit()

def month_start(day: date, months_back: int = 0) -> date:
    """First day of the month ``months_back`` months before ``day``'s month."""
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)

async def get_historical_monthly_average(
    user_id: uuid.UUID,
    db: AsyncSession,
    today: Optional[date] = None,
    months: Optional[int] = None,
) -> float:
    """
    Average monthly spending over the full months preceding ``today``'s month.

    Months without any expense are ignored; with no history at all the
    configured default baseline is returned.
    """
    today = today or date.today()
    months = months or settings.SPENDING_BASELINE_MONTHS

    window_start = month_start(today, months)
    window_end = month_start(today)
    result = await db.execute(
        select(Expense.date, Expense.amount).where(
            Expense.user_id == user_id,
            Expense.date >= window_start,
            Expense.date < window_end,
        )
    )
    totals: Dict[str, float] = {}
    for expense_date, amount in result.all():
        key = expense_date.strftime("%Y-%m")
        totals[key] = totals.get(key, 0.0) + float(amount)

    if not totals:
        return settings.DEFAULT_MONTHLY_SPENDING_BASELINE
    return sum(totals.values()) / len(totals)

async def get_spending_by_category(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: date,
    end_date: date,
) -> Dict[str, float]:
    expenses = await get_expenses_for_user(user_id, db, start_date=start_date, end_date=end_date)
    totals: Dict[str, float] = {}
    for ex in expenses:
        name = ex.category.name if ex.category else "Uncategorized"
        totals[name] = totals.get(name, 0.0) + float(ex.amount)
    return totals
