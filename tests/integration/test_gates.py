import pytest
from datetime import timedelta
from fastapi import Depends, FastAPI, status
from httpx import ASGITransport, AsyncClient
from modbase.auth.gates import RouteNeedsPermission, RouteNeedsRole, _RouteGate, parse_expression
from modbase.core.config import settings
from modbase.core.database import get_async_session
from modbase.core.error_handlers import register_exception_handlers
from modbase.core.security import create_access_token
from tests.conftest import token_headers

gate_app = FastAPI()
register_exception_handlers(gate_app)


@gate_app.get("/any-role", dependencies=[Depends(RouteNeedsRole("Administrator;Executive"))])
async def any_role():
    return {"ok": True}


@gate_app.get("/all-roles", dependencies=[Depends(RouteNeedsRole("Executive;User", needs_all=True))])
async def all_roles():
    return {"ok": True}


@gate_app.get("/permission", dependencies=[Depends(RouteNeedsPermission("blog.post.edit"))])
async def single_permission():
    return {"ok": True}


@gate_app.get("/all-permissions", dependencies=[Depends(RouteNeedsPermission("blog.post.edit;blog.post.undelete", "true"))])
async def all_permissions():
    return {"ok": True}


@pytest.fixture
async def gate_client(session_maker):
    async def override_get_db():
        async with session_maker() as db:
            yield db

    gate_app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=gate_app), base_url="http://test") as ac:
        yield ac
    gate_app.dependency_overrides.clear()


def test_parse_expression():
    assert parse_expression("Administrator; Executive;") == ["Administrator", "Executive"]
    assert parse_expression("blog.post.edit") == ["blog.post.edit"]


def test_gate_base_needs_a_check():
    with pytest.raises(TypeError):
        _RouteGate("Administrator")


@pytest.mark.asyncio
class TestRouteGates:
    """Role and permission gates"""

    async def test_any_of_roles(self, gate_client, executive_user):
        response = await gate_client.get("/any-role", headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_200_OK

    async def test_all_of_roles(self, gate_client, seeded, make_user, executive_user):
        response = await gate_client.get("/all-roles", headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        both = await make_user(roles=["Executive", "User"])
        response = await gate_client.get("/all-roles", headers=token_headers(both))
        assert response.status_code == status.HTTP_200_OK

    async def test_single_permission(self, gate_client, executive_user, plain_user):
        assert (await gate_client.get("/permission", headers=token_headers(executive_user))).status_code == 200
        assert (await gate_client.get("/permission", headers=token_headers(plain_user))).status_code == 401

    async def test_all_of_permissions(self, gate_client, executive_user, admin_user):
        assert (await gate_client.get("/all-permissions", headers=token_headers(executive_user))).status_code == 401
        assert (await gate_client.get("/all-permissions", headers=token_headers(admin_user))).status_code == 200

    async def test_inactive_user_is_denied(self, gate_client, seeded, make_user):
        user = await make_user(roles=["Administrator"], active=False)
        response = await gate_client.get("/permission", headers=token_headers(user))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestUnauthorizedResponses:
    """401 for API clients, redirect for browsers"""

    async def test_json_request_gets_plain_401(self, gate_client, seeded):
        response = await gate_client.get("/permission", headers={"Accept": "application/json"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.text == "Unauthorized."

    async def test_ajax_request_gets_plain_401(self, gate_client, seeded):
        response = await gate_client.get(
            "/permission", headers={"Accept": "*/*", "X-Requested-With": "XMLHttpRequest"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.text == "Unauthorized."

    async def test_browser_request_is_redirected_with_flash(self, gate_client, seeded):
        response = await gate_client.get("/permission", headers={"Accept": "text/html,application/xhtml+xml"})
        assert response.status_code == status.HTTP_302_FOUND
        assert response.headers["location"] == settings.UNAUTHORIZED_REDIRECT_URL
        assert settings.FLASH_COOKIE_NAME in response.headers["set-cookie"]

    async def test_browser_without_permission_is_redirected(self, gate_client, plain_user):
        gate_client.cookies.set(settings.ACCESS_TOKEN_COOKIE, create_access_token(plain_user.id))
        response = await gate_client.get("/permission", headers={"Accept": "text/html"})
        assert response.status_code == status.HTTP_302_FOUND

    async def test_token_cookie_is_accepted(self, gate_client, executive_user):
        gate_client.cookies.set(settings.ACCESS_TOKEN_COOKIE, create_access_token(executive_user.id))
        response = await gate_client.get("/permission", headers={"Accept": "text/html"})
        assert response.status_code == status.HTTP_200_OK

    async def test_expired_token_is_denied(self, gate_client, executive_user):
        token = create_access_token(executive_user.id, expires_delta=timedelta(minutes=-1))
        response = await gate_client.get(
            "/permission", headers={"Authorization": f"Bearer {token}", "Accept": "application/json"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
