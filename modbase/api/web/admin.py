from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.auth.access import AccessService, get_access_service
from modbase.auth.gates import RouteNeedsPermission
from modbase.core.config import settings
from modbase.core.database import get_async_session
from modbase.models.access.user import User
from modbase.repositories.base import ONLY_TRASHED
from modbase.repositories.blog.post_repository import PostRepository
from modbase.templating import template_response

router = APIRouter()

@router.get("/blog/posts", response_class=HTMLResponse)
async def posts_management(
    request: Request,
    trashed: Optional[str] = Query(None),
    user: Optional[User] = Depends(RouteNeedsPermission("blog.post.view-management")),
    access: AccessService = Depends(get_access_service),
    db: AsyncSession = Depends(get_async_session)
):
    """Posts management page; buttons are shown per permission"""
    grants = await access.grants_for(user)
    repository = PostRepository(db).sort("name", "asc")
    if trashed == ONLY_TRASHED and grants.allow("blog.post.undelete"):
        repository.only_trashed()
    posts = await repository.all()

    flash = request.cookies.get(settings.FLASH_COOKIE_NAME)
    response = template_response(request, "admin/blog/posts.html", grants, posts=posts, user=user, flash=flash)
    if flash:
        response.delete_cookie(settings.FLASH_COOKIE_NAME)
    return response
