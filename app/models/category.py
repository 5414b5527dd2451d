# app/models/category.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(length=100), nullable=False)
    color = Column(String(length=20), nullable=True)
    icon = Column(String(length=50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="categories")
    expenses = relationship("Expense", back_populates="category", passive_deletes=True)

    def __repr__(self):
        return f"<Category name={self.name} user_id={self.user_id}>"
