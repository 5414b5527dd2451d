from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime
import uuid

NotificationType = Literal["goal", "expense", "system"]
NotificationPriority = Literal["high", "medium", "low"]
NotificationStatus = Literal["unread", "read", "archived"]

class NotificationBase(BaseModel):
    title: str = Field(..., max_length=100)
    message: str = Field(..., max_length=500)
    type: NotificationType
    priority: NotificationPriority = "medium"
    action_url: Optional[str] = None

class NotificationCreate(NotificationBase):
    user_id: uuid.UUID
    status: NotificationStatus = "unread"
    dedupe_key: Optional[str] = None

class NotificationRead(NotificationBase):
    id: uuid.UUID
    user_id: uuid.UUID
    status: NotificationStatus
    created_at: datetime
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True
