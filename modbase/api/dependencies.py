from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.core.config import settings
from modbase.core.database import get_async_session
from modbase.core.security import decode_access_token
from modbase.models.access.user import User
import logging

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

def _token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get(settings.ACCESS_TOKEN_COOKIE)

async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_async_session)
) -> Optional[User]:
    """Resolve the actor from a Bearer token or the access-token cookie"""
    token = _token_from_request(request, credentials)
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        logger.debug("Rejected invalid or expired access token")
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    result = await session.execute(
        select(User).where(User.id == user_id, User.deleted_at.is_(None))
    )
    user = result.scalar_one_or_none()
    request.state.current_user = user
    return user
