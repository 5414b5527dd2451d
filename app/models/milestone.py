# app/models/milestone.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, Date, DateTime, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Uuid(as_uuid=True), ForeignKey("savings_goals.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=50), nullable=False)
    description = Column(String(length=200), nullable=True)
    target_amount = Column(Float, nullable=False)
    deadline = Column(Date, nullable=True)
    achieved = Column(Boolean, default=False, nullable=False)
    # Set once on the false -> true transition, never rewritten
    achieved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    goal = relationship("SavingsGoal", back_populates="milestones")

    def __repr__(self):
        return f"<Milestone title={self.title} target={self.target_amount} achieved={self.achieved}>"
