"""
Initial data seed (async, idempotent)
- Roles: Administrator (all permissions), Executive, User
- Module permissions for access and blog
- Executive gets blog management

Run:  python -m modbase.db.seeds.initial_data
"""

import asyncio
import logging
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modbase.core.database import async_session_maker
from modbase.core.logging_config import setup_logging
from modbase.db.init_db import create_tables
from modbase.db.seeds.permissions import seed_module_permissions
from modbase.models.access.role import Role
from modbase.models.access.role_permission import RolePermission

logger = logging.getLogger(__name__)

ROLES_SEED = [
    {"name": "Administrator", "all": True, "sort": 1},
    {"name": "Executive", "all": False, "sort": 2},
    {"name": "User", "all": False, "sort": 3},
]

MODULE_OBJECTS = [
    ("access", "role"),
    ("access", "user"),
    ("blog", "category"),
    ("blog", "post"),
    ("blog", "tag"),
]

ROLE_PERMISSIONS_SEED: Dict[str, List[str]] = {
    "Executive": [
        "blog.view-management",
        "blog.category.view-management",
        "blog.post.view-management",
        "blog.post.create",
        "blog.post.edit",
        "blog.post.delete",
        "blog.tag.view-management",
    ],
}


async def get_or_create_role(db: AsyncSession, data: dict) -> Role:
    result = await db.execute(select(Role).where(Role.name == data["name"]))
    obj = result.scalar_one_or_none()
    if obj:
        return obj
    obj = Role(**data)
    db.add(obj)
    await db.flush()
    logger.info(f"Role created: {obj.name}")
    return obj


async def ensure_role_permission(db: AsyncSession, role_id: int, permission_id: int):
    result = await db.execute(
        select(RolePermission).where(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        )
    )
    if result.scalar_one_or_none() is None:
        db.add(RolePermission(role_id=role_id, permission_id=permission_id))
        await db.flush()


async def seed(db: AsyncSession) -> Dict[str, Role]:
    # 1) Roles
    roles = {}
    for data in ROLES_SEED:
        roles[data["name"]] = await get_or_create_role(db, data)

    # 2) Module permissions
    permissions = {}
    for module, object_name in MODULE_OBJECTS:
        permissions.update(await seed_module_permissions(db, module, object_name, commit=False))

    # 3) Role -> permission mappings
    for role_name, permission_names in ROLE_PERMISSIONS_SEED.items():
        for name in permission_names:
            await ensure_role_permission(db, roles[role_name].id, permissions[name].id)

    await db.commit()
    logger.info(f"Initial data ready: {len(roles)} roles, {len(permissions)} permissions")
    return roles


async def main():
    setup_logging()
    await create_tables()

    async with async_session_maker() as db:
        try:
            await seed(db)
        except Exception as ex:
            await db.rollback()
            logger.error(f"Seed failed: {ex}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
