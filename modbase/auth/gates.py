"""
Route gates.

`RouteNeedsRole` and `RouteNeedsPermission` are dependency factories:
call them with a role/permission expression and they return a FastAPI
dependency that evaluates it for the current actor.

An expression is a single name (or id) or several joined by `;`.  For a
list, `needs_all` chooses between "any of" (default) and "all of".

Usage in a route:
    @router.delete("/{post_id}", dependencies=[Depends(RouteNeedsPermission("blog.post.delete"))])
    async def delete_post(...): ...

    @router.get("/", dependencies=[Depends(RouteNeedsRole("Administrator;Executive"))])
    async def dashboard(...): ...

Denial raises `UnauthorizedError`; the registered handler turns it into a
401 or a redirect depending on what the client expects.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from fastapi import Depends, Request

from modbase.api.dependencies import get_current_user_optional
from modbase.auth.access import AccessService, get_access_service
from modbase.core.exceptions import UnauthorizedError
from modbase.models.access.user import User

logger = logging.getLogger("modbase.access")

SEPARATOR = ";"


def parse_expression(expression: str) -> List[str]:
    return [part.strip() for part in str(expression).split(SEPARATOR) if part.strip()]


def _needs_all(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class _RouteGate(ABC):
    kind = "gate"

    def __init__(self, expression: str, needs_all=False):
        self.expression = expression
        self.names = parse_expression(expression)
        self.needs_all = _needs_all(needs_all)

    @abstractmethod
    async def check(self, access: AccessService, user: Optional[User]) -> bool:
        ...

    async def __call__(
        self,
        request: Request,
        user: Optional[User] = Depends(get_current_user_optional),
        access: AccessService = Depends(get_access_service),
    ) -> Optional[User]:
        if await self.check(access, user):
            return user

        logger.warning(
            f"{self.kind} '{self.expression}' denied for user "
            f"{getattr(user, 'id', None)} on {request.method} {request.url.path}"
        )
        raise UnauthorizedError()


class RouteNeedsRole(_RouteGate):
    kind = "Role"

    async def check(self, access: AccessService, user: Optional[User]) -> bool:
        if SEPARATOR in self.expression:
            return await access.has_roles(user, self.names, self.needs_all)
        return await access.has_role(user, self.expression.strip())


class RouteNeedsPermission(_RouteGate):
    kind = "Permission"

    async def check(self, access: AccessService, user: Optional[User]) -> bool:
        if SEPARATOR in self.expression:
            return await access.allow_multiple(user, self.names, self.needs_all)
        return await access.allow(user, self.expression.strip())
