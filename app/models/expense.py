# app/models/expense.py
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Enum, Date, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

class PaymentMode(str, enum.Enum):
    cash = "Cash"
    card = "Card"
    upi = "UPI"
    other = "Other"

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Float, nullable=False)
    description = Column(String(length=255), nullable=False, default="")
    date = Column(Date, nullable=False, index=True)
    payment_mode = Column(Enum(PaymentMode), default=PaymentMode.cash, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="expenses")
    category = relationship("Category", back_populates="expenses", lazy="joined")

    def __repr__(self):
        return f"<Expense amount={self.amount} date={self.date} user_id={self.user_id}>"
