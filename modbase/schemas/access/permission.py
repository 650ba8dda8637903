from typing import Optional, List
from pydantic import BaseModel, Field

class Permission(BaseModel):
    id: int
    name: str
    display_name: str
    system: bool = False
    group_id: Optional[int] = None
    sort: int = 0

    class Config:
        from_attributes = True

class PermissionWithDependencies(Permission):
    dependencies: List[int] = Field(default_factory=list)

class PermissionGroup(BaseModel):
    id: int
    name: str
    sort: int = 0
    parent_id: Optional[int] = None

    class Config:
        from_attributes = True
