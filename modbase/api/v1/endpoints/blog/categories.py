import logging
from typing import Dict, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.auth.gates import RouteNeedsPermission
from modbase.core.config import settings
from modbase.core.database import get_async_session
from modbase.core.exceptions import ValidationError
from modbase.repositories.blog.category_repository import CategoryRepository
from modbase.schemas.blog.category import Category, CategoryCreate, CategoryUpdate
from modbase.schemas.common.message import Message
from modbase.schemas.common.pagination import PaginatedResponse

logger = logging.getLogger(__name__)

router = APIRouter()

async def _ensure_slug_free(db: AsyncSession, slug: Optional[str], category_id: Optional[int] = None):
    if slug is None:
        return
    existing = await CategoryRepository(db).with_trashed().find_by_slug(slug)
    if existing is not None and existing.id != category_id:
        raise ValidationError(f"Category slug '{slug}' is already in use")

async def _save(write):
    try:
        return await write
    except IntegrityError as e:
        logger.error(f"Category write rejected by the database: {e.orig}")
        raise ValidationError("Category could not be saved")

@router.get(
    "/",
    response_model=PaginatedResponse[Category],
    dependencies=[Depends(RouteNeedsPermission("blog.category.view-management"))],
)
async def get_categories(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    name: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: str = Query("asc"),
    db: AsyncSession = Depends(get_async_session)
):
    """Get all categories"""
    repository = CategoryRepository(db)
    if name:
        repository.add_filter("name", "ilike", f"%{name}%")
    if active is not None:
        repository.add_filter("active", active)
    if sort_by:
        repository.sort(sort_by, sort_order)
    return await repository.paginate(per_page=page_size, page=page_index)

@router.get(
    "/options",
    response_model=Dict[int, str],
    dependencies=[Depends(RouteNeedsPermission("blog.post.view-management;blog.category.view-management"))],
)
async def get_category_options(
    db: AsyncSession = Depends(get_async_session)
):
    """Active categories as an id -> name map for select inputs"""
    return await CategoryRepository(db).add_filter("active", True).sort("name").list_all()

@router.get(
    "/{category_id}",
    response_model=Category,
    dependencies=[Depends(RouteNeedsPermission("blog.category.view-management"))],
)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get category by ID"""
    return await CategoryRepository(db).find(category_id)

@router.post(
    "/",
    response_model=Category,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RouteNeedsPermission("blog.category.create"))],
)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Create a new category, optionally adopting existing posts"""
    await _ensure_slug_free(db, category_data.slug)
    return await _save(CategoryRepository(db).create(category_data.model_dump()))

@router.patch(
    "/{category_id}",
    response_model=Category,
    dependencies=[Depends(RouteNeedsPermission("blog.category.edit"))],
)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session)
):
    """Update category"""
    await _ensure_slug_free(db, category_data.slug, category_id)
    return await _save(CategoryRepository(db).update(category_id, category_data.model_dump(exclude_unset=True)))

@router.delete(
    "/{category_id}",
    response_model=Message,
    dependencies=[Depends(RouteNeedsPermission("blog.category.delete"))],
)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Delete category (soft delete)"""
    await CategoryRepository(db).destroy(category_id)
    return {"message": "Category deleted successfully"}

@router.post(
    "/{category_id}/restore",
    response_model=Category,
    dependencies=[Depends(RouteNeedsPermission("blog.category.undelete"))],
)
async def restore_category(
    category_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Restore a soft-deleted category"""
    return await CategoryRepository(db).restore(category_id)
