# app/schemas/expense.py
from typing import Optional, Dict
from pydantic import BaseModel, Field
import datetime as dt
import uuid
from app.models.expense import PaymentMode

class ExpenseBase(BaseModel):
    amount: float = Field(..., gt=0, description="Amount spent")
    description: str = Field("", max_length=255, description="What the money was spent on")
    date: dt.date
    category_id: Optional[uuid.UUID] = None
    payment_mode: PaymentMode = PaymentMode.cash

class ExpenseCreate(ExpenseBase):
    pass

class ExpenseUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = None
    category_id: Optional[uuid.UUID] = None
    payment_mode: Optional[PaymentMode] = None

class ExpenseRead(ExpenseBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: dt.datetime

    class Config:
        from_attributes = True

class MonthlySpendingSummary(BaseModel):
    month: str
    total_spent: float
    historical_average: float
    by_category: Dict[str, float]
