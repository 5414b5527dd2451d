# app/models/notification.py
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from datetime import datetime

# status -> statuses it may move to
ALLOWED_STATUS_TRANSITIONS = {
    "unread": {"read", "archived"},
    "read": {"archived"},
    "archived": set(),
}

class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint("user_id", "dedupe_key", name="uq_notifications_user_dedupe_key"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    type = Column(String, nullable=False)       # 'goal', 'expense', 'system'
    priority = Column(String, nullable=False, default="medium")
    status = Column(String, nullable=False, default="unread")
    action_url = Column(String, nullable=True)
    # One notification per logical event, e.g. 'goal-achieved:<goal id>'
    dedupe_key = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    read_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="notifications")

    def can_transition(self, new_status: str) -> bool:
        return new_status in ALLOWED_STATUS_TRANSITIONS.get(self.status, set())


class IssuedNotificationKey(Base):
    """Every dedupe key a user has been notified under; kept when the notification is deleted"""
    __tablename__ = "issued_notification_keys"
    __table_args__ = (
        UniqueConstraint("user_id", "dedupe_key", name="uq_issued_notification_keys_user_key"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    dedupe_key = Column(String, nullable=False)
    issued_at = Column(DateTime, default=datetime.utcnow)
