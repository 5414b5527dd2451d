# app/schemas/milestone.py
from typing import Optional, Literal, List
from pydantic import BaseModel, Field
from datetime import date, datetime
import uuid

class MilestoneBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=50)
    target_amount: float = Field(..., gt=0, description="Must not exceed the goal's target amount")
    deadline: Optional[date] = None
    description: Optional[str] = Field(None, max_length=200)

class MilestoneCreate(MilestoneBase):
    pass

class MilestoneUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=50)
    target_amount: Optional[float] = Field(None, gt=0)
    deadline: Optional[date] = None
    description: Optional[str] = Field(None, max_length=200)

class MilestoneRead(MilestoneBase):
    id: uuid.UUID
    goal_id: uuid.UUID
    achieved: bool
    achieved_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class MilestoneStatus(BaseModel):
    milestone_id: uuid.UUID
    status: Literal["completed", "overdue", "urgent", "in-progress"]
    progress: float
    days_remaining: Optional[int] = None

class MilestoneAnalytics(BaseModel):
    total: int
    achieved: int
    pending: int
    completion_rate: float
    average_completion_days: Optional[int] = None
    statuses: List[MilestoneStatus] = []
