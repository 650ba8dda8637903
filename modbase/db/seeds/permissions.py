"""
Module permission seeding (async, idempotent)

For a module/object pair such as ("blog", "post") this ensures:
- a "Blog" permission group with `blog.view-management`
- a "Posts" group nested under it
- `blog.post.view-management`, depending on `blog.view-management`
- create/edit/delete/undelete/permanently-delete, each depending on
  `blog.post.view-management`
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modbase.models.access.permission import Permission
from modbase.models.access.permission_group import PermissionGroup
from modbase.repositories.access.permission_dependency_repository import PermissionDependencyRepository

logger = logging.getLogger(__name__)

# (action, display name template, sort)
OBJECT_ACTIONS: List[Tuple[str, str, int]] = [
    ("create", "Create {label}", 5),
    ("edit", "Edit {label}", 5),
    ("delete", "Delete {label}", 5),
    ("undelete", "Restore {label}", 13),
    ("permanently-delete", "Permanently Delete {label}", 14),
]


def pluralize(word: str) -> str:
    label = word.replace("-", " ").replace("_", " ").title()
    if label.endswith("y") and label[-2:-1].lower() not in "aeiou":
        return label[:-1] + "ies"
    if label.endswith("s"):
        return label
    return label + "s"


async def get_or_create_group(db: AsyncSession, name: str, parent_id: Optional[int] = None, sort: int = 1) -> PermissionGroup:
    parent = PermissionGroup.parent_id.is_(None) if parent_id is None else PermissionGroup.parent_id == parent_id
    result = await db.execute(select(PermissionGroup).where(PermissionGroup.name == name, parent))
    group = result.scalars().first()
    if group:
        return group
    group = PermissionGroup(name=name, parent_id=parent_id, sort=sort)
    db.add(group)
    await db.flush()
    logger.info(f"Permission group created: {name}")
    return group


async def get_or_create_permission(db: AsyncSession, data: dict) -> Permission:
    result = await db.execute(select(Permission).where(Permission.name == data["name"]))
    obj = result.scalar_one_or_none()
    if obj:
        return obj
    obj = Permission(**data)
    db.add(obj)
    await db.flush()
    logger.info(f"Permission created: {obj.name}")
    return obj


async def seed_module_permissions(
    db: AsyncSession,
    module: str,
    object_name: str,
    label: Optional[str] = None,
    commit: bool = True,
) -> Dict[str, Permission]:
    """Seed the permission set of one object of a module, keyed by permission name."""
    label = label or pluralize(object_name)
    dependencies = PermissionDependencyRepository(db, autocommit=False)

    module_group = await get_or_create_group(db, module.replace("-", " ").title())
    module_view = await get_or_create_permission(db, {
        "name": f"{module}.view-management",
        "display_name": f"View {module.title()} Management",
        "system": True,
        "group_id": module_group.id,
        "sort": 1,
    })

    object_group = await get_or_create_group(db, label, parent_id=module_group.id)
    object_view = await get_or_create_permission(db, {
        "name": f"{module}.{object_name}.view-management",
        "display_name": f"View {label} Management",
        "system": True,
        "group_id": object_group.id,
        "sort": 5,
    })
    await dependencies.create(object_view.id, module_view.id)

    seeded = {module_view.name: module_view, object_view.name: object_view}
    for action, display_name, sort in OBJECT_ACTIONS:
        permission = await get_or_create_permission(db, {
            "name": f"{module}.{object_name}.{action}",
            "display_name": display_name.format(label=label),
            "system": True,
            "group_id": object_group.id,
            "sort": sort,
        })
        await dependencies.create(permission.id, object_view.id)
        seeded[permission.name] = permission

    if commit:
        await db.commit()
    logger.info(f"Permissions ready for {module}.{object_name}: {len(seeded)}")
    return seeded
