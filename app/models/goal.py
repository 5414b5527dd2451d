# app/models/goal.py
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Float, Date, DateTime, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

class GoalPriority(str, enum.Enum):
    high = "High"
    medium = "Medium"
    low = "Low"

class GoalType(str, enum.Enum):
    emergency = "Emergency"
    investment = "Investment"
    goal = "Goal"

class SavingsGoal(Base):
    __tablename__ = "savings_goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    target_amount = Column(Float, nullable=False)
    # Cached sum of contributions, only ever written by recalculate_current_amount
    current_amount = Column(Float, nullable=False, default=0.0)
    deadline = Column(Date, nullable=True)
    priority = Column(Enum(GoalPriority), default=GoalPriority.medium, nullable=False)
    type = Column(Enum(GoalType), default=GoalType.goal, nullable=False)
    notes = Column(String(length=500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="goals")
    contributions = relationship(
        "Contribution",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    milestones = relationship(
        "Milestone",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def progress_percentage(self) -> float:
        if not self.target_amount:
            return 0.0
        return (self.current_amount or 0.0) / self.target_amount * 100

    def __repr__(self):
        return f"<SavingsGoal name={self.name} target={self.target_amount} current={self.current_amount}>"
