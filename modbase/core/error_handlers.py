"""
Exception handlers registered on the FastAPI application.

`UnauthorizedError` is the only error whose response depends on the shape
of the request: API-style requests (AJAX, or asking for JSON) get a plain
401, browser requests are redirected with a flash message.
"""
import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from modbase.core.config import settings
from modbase.core.exceptions import BaseAppException, UnauthorizedError
from modbase.core.request_context import expects_json, get_request_context

logger = logging.getLogger(__name__)


async def unauthorized_exception_handler(request: Request, exc: UnauthorizedError):
    context = get_request_context(request)
    logger.warning(f"Access denied on {context['endpoint']} from {context['ip_address']}")

    if expects_json(request):
        return PlainTextResponse(exc.detail, status_code=status.HTTP_401_UNAUTHORIZED)

    response = RedirectResponse(settings.UNAUTHORIZED_REDIRECT_URL, status_code=status.HTTP_302_FOUND)
    response.set_cookie(settings.FLASH_COOKIE_NAME, settings.UNAUTHORIZED_MESSAGE, httponly=True)
    return response


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UnauthorizedError, unauthorized_exception_handler)
    app.add_exception_handler(BaseAppException, app_exception_handler)
