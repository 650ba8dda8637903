import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.auth.gates import RouteNeedsPermission
from modbase.core.config import settings
from modbase.core.database import get_async_session
from modbase.core.exceptions import ValidationError
from modbase.repositories.access.role_repository import RoleRepository
from modbase.schemas.access.role import Role, RoleCreate, RoleUpdate, RoleWithPermissions
from modbase.schemas.common.message import Message
from modbase.schemas.common.pagination import PaginatedResponse

logger = logging.getLogger(__name__)

router = APIRouter()

async def _ensure_name_free(repository: RoleRepository, name: Optional[str], role_id: Optional[int] = None):
    if name is None:
        return
    existing = await repository.find_by_name(name)
    if existing is not None and existing.id != role_id:
        raise ValidationError(f"Role '{name}' already exists")

async def _save(write):
    try:
        return await write
    except IntegrityError as e:
        logger.error(f"Role write rejected by the database: {e.orig}")
        raise ValidationError("Role could not be saved")

async def _with_permissions(repository: RoleRepository, role) -> RoleWithPermissions:
    selected = await repository.relationships["permissions"].linked_ids(repository.session, role)
    return RoleWithPermissions.model_validate(role).model_copy(update={"permissions": selected})

@router.get(
    "/",
    response_model=PaginatedResponse[Role],
    dependencies=[Depends(RouteNeedsPermission("access.role.view-management"))],
)
async def get_roles(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    permission: Optional[str] = Query(None, description="Only roles holding this permission"),
    db: AsyncSession = Depends(get_async_session)
):
    """Get roles ordered by sort"""
    repository = RoleRepository(db).sort("sort", "asc")
    if permission:
        repository.add_filter("permissions.name", permission)
    return await repository.paginate(per_page=page_size, page=page_index)

@router.get(
    "/{role_id}",
    response_model=RoleWithPermissions,
    dependencies=[Depends(RouteNeedsPermission("access.role.view-management"))],
)
async def get_role(
    role_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get role with its permission ids"""
    repository = RoleRepository(db)
    return await _with_permissions(repository, await repository.find(role_id))

@router.post(
    "/",
    response_model=RoleWithPermissions,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RouteNeedsPermission("access.role.create"))],
)
async def create_role(
    role_data: RoleCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Create a new role"""
    repository = RoleRepository(db)
    await _ensure_name_free(repository, role_data.name)
    role = await _save(repository.create(role_data.model_dump()))
    return await _with_permissions(repository, role)

@router.patch(
    "/{role_id}",
    response_model=RoleWithPermissions,
    dependencies=[Depends(RouteNeedsPermission("access.role.edit"))],
)
async def update_role(
    role_id: int,
    role_data: RoleUpdate,
    db: AsyncSession = Depends(get_async_session)
):
    """Update role; `permissions`, when sent, replaces the role's permissions"""
    repository = RoleRepository(db)
    await _ensure_name_free(repository, role_data.name, role_id)
    role = await _save(repository.update(role_id, role_data.model_dump(exclude_unset=True)))
    return await _with_permissions(repository, role)

@router.delete(
    "/{role_id}",
    response_model=Message,
    dependencies=[Depends(RouteNeedsPermission("access.role.delete"))],
)
async def delete_role(
    role_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Delete role"""
    await RoleRepository(db).destroy(role_id)
    return {"message": "Role deleted successfully"}
