# app/schemas/goal.py
from typing import Optional
from pydantic import BaseModel, Field
from datetime import date, datetime
import uuid
from app.models.goal import GoalPriority, GoalType

class GoalBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Goal name, e.g. Emergency Fund")
    target_amount: float = Field(..., gt=0, description="Amount to save")
    deadline: Optional[date] = None
    priority: GoalPriority = GoalPriority.medium
    type: GoalType = GoalType.goal
    notes: Optional[str] = Field(None, max_length=500)

class GoalCreate(GoalBase):
    # Recorded as an "Initial deposit" contribution, never written to current_amount directly
    current_amount: float = Field(0.0, ge=0)

class GoalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    target_amount: Optional[float] = Field(None, gt=0)
    deadline: Optional[date] = None
    priority: Optional[GoalPriority] = None
    type: Optional[GoalType] = None
    notes: Optional[str] = Field(None, max_length=500)

class GoalRead(GoalBase):
    id: uuid.UUID
    user_id: uuid.UUID
    current_amount: float
    progress_percentage: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
