from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.auth.gates import RouteNeedsPermission
from modbase.core.database import get_async_session
from modbase.repositories.access.permission_dependency_repository import PermissionDependencyRepository
from modbase.repositories.access.permission_group_repository import PermissionGroupRepository
from modbase.repositories.access.permission_repository import PermissionRepository
from modbase.schemas.access.permission import Permission, PermissionGroup, PermissionWithDependencies

router = APIRouter()

@router.get(
    "/",
    response_model=List[Permission],
    dependencies=[Depends(RouteNeedsPermission("access.role.view-management"))],
)
async def get_permissions(
    group_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session)
):
    """Get permissions ordered by sort, optionally within one group"""
    repository = PermissionRepository(db).sort("sort", "asc")
    if group_id is not None:
        repository.add_filter("group_id", group_id)
    return await repository.all()

@router.get(
    "/groups",
    response_model=List[PermissionGroup],
    dependencies=[Depends(RouteNeedsPermission("access.role.view-management"))],
)
async def get_permission_groups(
    parent_id: Optional[int] = Query(None, description="Children of this group; root groups when omitted"),
    db: AsyncSession = Depends(get_async_session)
):
    """Get permission groups one level at a time"""
    repository = PermissionGroupRepository(db)
    if parent_id is None:
        return await repository.roots()
    return await repository.add_filter("parent_id", parent_id).sort("sort", "asc").all()

@router.get(
    "/{permission_id}",
    response_model=PermissionWithDependencies,
    dependencies=[Depends(RouteNeedsPermission("access.role.view-management"))],
)
async def get_permission(
    permission_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get permission with the ids of the permissions it depends on"""
    permission = await PermissionRepository(db).find(permission_id)
    dependencies = await PermissionDependencyRepository(db).dependency_ids(permission.id)
    return PermissionWithDependencies.model_validate(permission).model_copy(update={"dependencies": dependencies})
