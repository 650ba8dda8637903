import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.auth.gates import RouteNeedsPermission
from modbase.core.config import settings
from modbase.core.database import get_async_session
from modbase.core.exceptions import ValidationError
from modbase.repositories.base import ONLY_TRASHED, WITH_TRASHED
from modbase.repositories.blog.post_repository import PostRepository
from modbase.schemas.blog.post import Post, PostCreate, PostDetail, PostReplace, PostUpdate
from modbase.schemas.common.message import Message
from modbase.schemas.common.pagination import PaginatedResponse

logger = logging.getLogger(__name__)

router = APIRouter()

async def _detail(repository: PostRepository, post) -> PostDetail:
    tags = await repository.relationships["tags"].linked_ids(repository.session, post)
    return PostDetail.model_validate(post).model_copy(update={"tags": tags})

async def _ensure_slug_free(db: AsyncSession, slug: Optional[str], post_id: Optional[int] = None):
    if slug is None:
        return
    existing = await PostRepository(db).with_trashed().find_by_slug(slug)
    if existing is not None and existing.id != post_id:
        raise ValidationError(f"Post slug '{slug}' is already in use")

async def _save(write):
    try:
        return await write
    except IntegrityError as e:
        logger.error(f"Post write rejected by the database: {e.orig}")
        raise ValidationError("Post could not be saved")

@router.get(
    "/",
    response_model=PaginatedResponse[Post],
    dependencies=[Depends(RouteNeedsPermission("blog.post.view-management"))],
)
async def get_posts(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None),
    tag: Optional[str] = Query(None, description="Tag slug"),
    active: Optional[bool] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: str = Query("asc"),
    trashed: Optional[str] = Query(None, pattern="^(with|only)$"),
    db: AsyncSession = Depends(get_async_session)
):
    """Get posts with optional filters, sorting and soft-delete scope"""
    repository = PostRepository(db)
    repository.add_filter("search", search)
    if category_id is not None:
        repository.add_filter("category_id", category_id)
    if tag:
        repository.add_filter("tags.slug", tag)
    if active is not None:
        repository.add_filter("active", active)
    if sort_by:
        repository.sort(sort_by, sort_order)
    if trashed == WITH_TRASHED:
        repository.with_trashed()
    elif trashed == ONLY_TRASHED:
        repository.only_trashed()

    return await repository.paginate(per_page=page_size, page=page_index)

@router.get(
    "/{post_id}",
    response_model=PostDetail,
    dependencies=[Depends(RouteNeedsPermission("blog.post.view-management"))],
)
async def get_post(
    post_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get post by ID"""
    repository = PostRepository(db)
    post = await repository.find(post_id)
    return await _detail(repository, post)

@router.post(
    "/",
    response_model=PostDetail,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RouteNeedsPermission("blog.post.create"))],
)
async def create_post(
    post_data: PostCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Create a new post"""
    repository = PostRepository(db)
    await _ensure_slug_free(db, post_data.slug)
    post = await _save(repository.create(post_data.model_dump()))
    return await _detail(repository, post)

@router.put(
    "/{post_id}",
    response_model=PostDetail,
    dependencies=[Depends(RouteNeedsPermission("blog.post.edit"))],
)
async def replace_post(
    post_id: int,
    post_data: PostReplace,
    db: AsyncSession = Depends(get_async_session)
):
    """Replace post; many-valued relationships missing from the body are cleared"""
    repository = PostRepository(db)
    await _ensure_slug_free(db, post_data.slug, post_id)
    post = await _save(repository.update(post_id, post_data.model_dump(exclude_unset=True), full_update=True))
    return await _detail(repository, post)

@router.patch(
    "/{post_id}",
    response_model=PostDetail,
    dependencies=[Depends(RouteNeedsPermission("blog.post.edit"))],
)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    db: AsyncSession = Depends(get_async_session)
):
    """Update post; only the fields sent are touched"""
    repository = PostRepository(db)
    await _ensure_slug_free(db, post_data.slug, post_id)
    post = await _save(repository.update(post_id, post_data.model_dump(exclude_unset=True)))
    return await _detail(repository, post)

@router.delete(
    "/{post_id}",
    response_model=Message,
    dependencies=[Depends(RouteNeedsPermission("blog.post.delete"))],
)
async def delete_post(
    post_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Delete post (soft delete)"""
    await PostRepository(db).destroy(post_id)
    return {"message": "Post deleted successfully"}

@router.post(
    "/{post_id}/restore",
    response_model=PostDetail,
    dependencies=[Depends(RouteNeedsPermission("blog.post.undelete"))],
)
async def restore_post(
    post_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Restore a soft-deleted post"""
    repository = PostRepository(db)
    post = await repository.restore(post_id)
    return await _detail(repository, post)

@router.delete(
    "/{post_id}/permanent",
    response_model=Message,
    dependencies=[Depends(RouteNeedsPermission("blog.post.permanently-delete"))],
)
async def force_delete_post(
    post_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Permanently delete a post that is already in the trash"""
    await PostRepository(db).force_delete(post_id)
    return {"message": "Post permanently deleted"}
