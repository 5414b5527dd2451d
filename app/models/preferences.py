# app/models/preferences.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Boolean, Integer, Float, DateTime, ForeignKey, JSON, Uuid
from app.core.database import Base

class NotificationPreferences(Base):
    __tablename__ = "notification_preferences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    goal_deadline_reminder = Column(Boolean, default=True, nullable=False)
    deadline_days_threshold = Column(Integer, default=7, nullable=False)
    goal_progress_alert = Column(Boolean, default=True, nullable=False)
    progress_threshold = Column(Float, default=20.0, nullable=False)
    monthly_spending_alert = Column(Boolean, default=True, nullable=False)
    spending_threshold = Column(Float, default=120.0, nullable=False)
    email_notifications = Column(Boolean, default=True, nullable=False)
    notification_types = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
