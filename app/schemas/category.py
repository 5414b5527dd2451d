# app/schemas/category.py
from typing import Optional
from pydantic import BaseModel, Field
import uuid

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    icon: Optional[str] = Field(None, max_length=50)

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    icon: Optional[str] = Field(None, max_length=50)

class CategoryRead(CategoryBase):
    id: uuid.UUID
    user_id: uuid.UUID

    class Config:
        from_attributes = True
