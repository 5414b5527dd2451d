# app/api/v1/routes/expenses.py
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import date
import uuid
import logging

from app.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseRead, MonthlySpendingSummary
from app.crud import expense as crud_expense
from app.crud.category import get_category_by_id
from app.api.deps import get_current_user
from app.core.database import get_async_session
from app.models.user import User
from app.utils.triggers import evaluate_expense_triggers
from app.utils.realtime import manager

router = APIRouter(prefix="/expenses", tags=["Expenses"])
logger = logging.getLogger(__name__)

async def _check_category(category_id: Optional[uuid.UUID], user: User, db: AsyncSession):
    if category_id and not await get_category_by_id(category_id, user.id, db):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Unknown category")

@router.get("", response_model=List[ExpenseRead])
async def read_expenses(
    start_date: Optional[date] = Query(None, description="Only expenses on or after this date"),
    end_date: Optional[date] = Query(None, description="Only expenses on or before this date"),
    category_id: Optional[uuid.UUID] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await crud_expense.get_expenses_for_user(
        user.id, db,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        limit=limit,
        offset=offset,
    )

@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    ex_in: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await _check_category(ex_in.category_id, user, db)
    expense = await crud_expense.create_expense_for_user(user.id, ex_in, db)
    await manager.push(user.id, "expenses", "INSERT", expense)

    await evaluate_expense_triggers(db, user.id)
    await db.refresh(expense)
    return expense

@router.get("/summary/monthly", response_model=MonthlySpendingSummary)
async def read_monthly_summary(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """This month's spending, by category, next to the historical monthly average"""
    today = date.today()
    start = crud_expense.month_start(today)
    by_category = await crud_expense.get_spending_by_category(user.id, db, start, today)
    return MonthlySpendingSummary(
        month=today.strftime("%Y-%m"),
        total_spent=sum(by_category.values()),
        historical_average=await crud_expense.get_historical_monthly_average(user.id, db, today=today),
        by_category=by_category,
    )

@router.get("/{expense_id}", response_model=ExpenseRead)
async def read_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await crud_expense.get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense

@router.patch("/{expense_id}", response_model=ExpenseRead)
async def update_expense(
    expense_id: uuid.UUID,
    ex_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await crud_expense.get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Expense not found")
    await _check_category(ex_in.category_id, user, db)
    expense = await crud_expense.update_expense(expense, ex_in, db)
    await manager.push(user.id, "expenses", "UPDATE", expense)

    await evaluate_expense_triggers(db, user.id)
    await db.refresh(expense)
    return expense

@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await crud_expense.get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Expense not found")
    await crud_expense.delete_expense(expense, db)
    await manager.push(user.id, "expenses", "DELETE", {"id": expense_id})
    return None
