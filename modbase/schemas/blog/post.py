from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

class PostBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=191)
    slug: str = Field(..., min_length=1, max_length=191)
    body: Optional[str] = None
    active: bool = True

class PostCreate(PostBase):
    category: Optional[int] = None
    tags: List[int] = Field(default_factory=list)

class PostReplace(PostCreate):
    """Full representation sent with PUT; omitted relationships are cleared"""
    pass

class PostUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=191)
    slug: Optional[str] = Field(None, min_length=1, max_length=191)
    body: Optional[str] = None
    active: Optional[bool] = None
    category: Optional[int] = None
    tags: Optional[List[int]] = None

class Post(PostBase):
    id: int
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PostDetail(Post):
    tags: List[int] = Field(default_factory=list)
