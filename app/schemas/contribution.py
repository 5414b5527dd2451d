# app/schemas/contribution.py
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import datetime as dt
import uuid

class ContributionCreate(BaseModel):
    amount: float = Field(..., gt=0, description="Deposited amount")
    date: dt.date
    notes: Optional[str] = Field(None, max_length=200)

    @field_validator("date")
    @classmethod
    def not_in_future(cls, value: dt.date) -> dt.date:
        if value > dt.date.today():
            raise ValueError("Contribution date cannot be in the future")
        return value

class ContributionRead(BaseModel):
    id: uuid.UUID
    goal_id: uuid.UUID
    amount: float
    date: dt.date
    notes: Optional[str] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True
