import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from modbase.core.request_context import HDR_REQUEST_ID, get_request_context

logger = logging.getLogger("access")

class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log line per request, with the resolved user and gate outcome"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        context = get_request_context(request)

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        user = getattr(request.state, "current_user", None)
        kind = context["kind"]

        message = (
            f"{context['endpoint']} {response.status_code} {elapsed:.4f}s - "
            f"{kind} client={context['ip_address'] or 'unknown'} user={getattr(user, 'id', '-')}"
        )
        if context["request_id"]:
            message += f" request_id={context['request_id']}"
            response.headers[HDR_REQUEST_ID] = context["request_id"]

        # denials and gate redirects
        if response.status_code == 401 or (response.status_code == 302 and kind == "web"):
            logger.warning(message)
        else:
            logger.info(message)

        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response
