from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

class RoleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=191)
    all: bool = False
    sort: int = 0

class RoleCreate(RoleBase):
    permissions: List[int] = Field(default_factory=list)

class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=191)
    all: Optional[bool] = None
    sort: Optional[int] = None
    permissions: Optional[List[int]] = None

class Role(RoleBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class RoleWithPermissions(Role):
    permissions: List[int] = Field(default_factory=list)
