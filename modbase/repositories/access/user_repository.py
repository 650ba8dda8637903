import logging
from typing import Any, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.core.config import Settings, settings as default_settings
from modbase.models.access.permission import Permission
from modbase.models.access.role import Role
from modbase.models.access.user import User
from modbase.models.access.user_permission import UserPermission
from modbase.models.access.user_role import UserRole
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship, SyncResult

logger = logging.getLogger(__name__)

class UserRepository(BaseRepository[User]):
    model = User
    sortable = ("email", "created_at")
    filterable = ("email", "confirmed", "roles.name", "roles.id", "permissions.name")
    fillable = ("name", "email", "confirmed", "active")
    relationships = {
        "roles": Relationship.many_to_many(Role, UserRole, "user_id", "role_id"),
        "permissions": Relationship.many_to_many(Permission, UserPermission, "user_id", "permission_id"),
    }

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        super().__init__(session)

    def attach_handlers(self):
        return {"roles": self.attach_roles}

    async def attach_roles(self, item: User, ids: List[Any], new: bool) -> SyncResult:
        """New users without roles get the configured default role."""
        if new and not ids and self.settings.ACCESS_DEFAULT_ROLE:
            role_id = await self.session.scalar(
                select(Role.id).where(Role.name == self.settings.ACCESS_DEFAULT_ROLE)
            )
            if role_id is not None:
                logger.info(f"Assigning default role '{self.settings.ACCESS_DEFAULT_ROLE}' to user {item.id}")
                ids = [role_id]
        return await self.relationships["roles"].sync(self.session, item, ids)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()
