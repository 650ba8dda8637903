from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.auth.access import AccessService, get_access_service
from modbase.auth.gates import RouteNeedsPermission
from modbase.core.database import get_async_session
from modbase.repositories.access.user_repository import UserRepository
from modbase.schemas.access.user import UserRoles, UserRolesUpdate

router = APIRouter()

@router.get(
    "/{user_id}/roles",
    response_model=UserRoles,
    dependencies=[Depends(RouteNeedsPermission("access.user.view-management"))],
)
async def get_user_roles(
    user_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get the role ids assigned to a user"""
    selected = await UserRepository(db).selected_relationships(user_id)
    return UserRoles(user_id=user_id, roles=selected["roles"])

@router.put(
    "/{user_id}/roles",
    response_model=UserRoles,
    dependencies=[Depends(RouteNeedsPermission("access.user.edit"))],
)
async def update_user_roles(
    user_id: int,
    roles_data: UserRolesUpdate,
    db: AsyncSession = Depends(get_async_session),
    access: AccessService = Depends(get_access_service)
):
    """Replace the roles assigned to a user"""
    repository = UserRepository(db)
    user = await repository.update(user_id, {"roles": roles_data.roles})
    access.invalidate(user)
    selected = await repository.relationships["roles"].linked_ids(db, user)
    return UserRoles(user_id=user.id, roles=selected)
