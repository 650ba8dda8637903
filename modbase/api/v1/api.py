from fastapi import APIRouter
from modbase.api.v1.endpoints.access import permissions, roles, users
from modbase.api.v1.endpoints.blog import categories, posts

api_router = APIRouter()

# Access routes
api_router.include_router(roles.router, prefix="/access/roles", tags=["Access"])
api_router.include_router(permissions.router, prefix="/access/permissions", tags=["Access"])
api_router.include_router(users.router, prefix="/access/users", tags=["Access"])

# Blog routes
api_router.include_router(categories.router, prefix="/blog/categories", tags=["Blog"])
api_router.include_router(posts.router, prefix="/blog/posts", tags=["Blog"])
