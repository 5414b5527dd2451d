# app/schemas/preferences.py
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
import uuid
from app.schemas.notification import NotificationType

class PreferencesBase(BaseModel):
    goal_deadline_reminder: bool = True
    deadline_days_threshold: int = Field(7, ge=1, le=365)
    goal_progress_alert: bool = True
    progress_threshold: float = Field(20.0, ge=0, le=100)
    monthly_spending_alert: bool = True
    spending_threshold: float = Field(120.0, gt=0)
    email_notifications: bool = True
    notification_types: List[NotificationType] = ["goal", "expense", "system"]

class PreferencesUpdate(BaseModel):
    goal_deadline_reminder: Optional[bool] = None
    deadline_days_threshold: Optional[int] = Field(None, ge=1, le=365)
    goal_progress_alert: Optional[bool] = None
    progress_threshold: Optional[float] = Field(None, ge=0, le=100)
    monthly_spending_alert: Optional[bool] = None
    spending_threshold: Optional[float] = Field(None, gt=0)
    email_notifications: Optional[bool] = None
    notification_types: Optional[List[NotificationType]] = None

class PreferencesRead(PreferencesBase):
    id: uuid.UUID
    user_id: uuid.UUID
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
