from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=191)
    slug: str = Field(..., min_length=1, max_length=191)
    description: Optional[str] = None
    active: bool = True

class CategoryCreate(CategoryBase):
    posts: List[int] = Field(default_factory=list)

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=191)
    slug: Optional[str] = Field(None, min_length=1, max_length=191)
    description: Optional[str] = None
    active: Optional[bool] = None
    posts: Optional[List[int]] = None

class Category(CategoryBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
