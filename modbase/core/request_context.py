from typing import Optional, Dict
from fastapi import Request

HDR_REQUEST_ID = "X-Request-Id"
HDR_REQUESTED_WITH = "X-Requested-With"


def is_ajax(request: Request) -> bool:
    return request.headers.get(HDR_REQUESTED_WITH, "").lower() == "xmlhttprequest"


def wants_json(request: Request) -> bool:
    """True when the first acceptable content type is JSON."""
    accept = request.headers.get("accept", "")
    if not accept:
        return False
    first = accept.split(",")[0].split(";")[0].strip().lower()
    return "/json" in first or "+json" in first


def expects_json(request: Request) -> bool:
    """API-style request: AJAX or asking for JSON."""
    return is_ajax(request) or wants_json(request)


def get_request_context(request: Request) -> Dict[str, Optional[str]]:
    """
    What the access log and the denial log record about a request:
    method and path, client address, caller supplied request id and
    whether the caller is an API client or a browser.
    """
    return {
        "endpoint": f"{request.method} {request.url.path}",
        "ip_address": request.client.host if request.client else None,
        "request_id": request.headers.get(HDR_REQUEST_ID),
        "kind": "api" if expects_json(request) else "web",
    }
