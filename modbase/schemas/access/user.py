from typing import List, Optional
from pydantic import BaseModel, Field, EmailStr
from datetime import datetime

class User(BaseModel):
    id: int
    name: str
    email: EmailStr
    confirmed: bool
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserRolesUpdate(BaseModel):
    roles: List[int] = Field(default_factory=list)

class UserRoles(BaseModel):
    user_id: int
    roles: List[int] = Field(default_factory=list)
