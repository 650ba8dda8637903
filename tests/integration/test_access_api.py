import pytest
from fastapi import status
from httpx import AsyncClient
from tests.conftest import token_headers


@pytest.mark.asyncio
class TestRolesApi:
    """Role management endpoints"""

    async def test_list_roles(self, client: AsyncClient, admin_user):
        response = await client.get("/api/v1/access/roles/", headers=token_headers(admin_user))
        assert response.status_code == status.HTTP_200_OK
        assert [role["name"] for role in response.json()["data"]] == ["Administrator", "Executive", "User"]

    async def test_create_role_with_permissions(self, client: AsyncClient, admin_user):
        headers = token_headers(admin_user)
        permissions = (await client.get("/api/v1/access/permissions/", headers=headers)).json()
        edit = next(permission for permission in permissions if permission["name"] == "blog.post.edit")

        response = await client.post(
            "/api/v1/access/roles/", json={"name": "Editor", "permissions": [edit["id"]]}, headers=headers
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["permissions"] == [edit["id"]]

    async def test_duplicate_role(self, client: AsyncClient, admin_user):
        response = await client.post("/api/v1/access/roles/", json={"name": "User"}, headers=token_headers(admin_user))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_rename_role_to_existing_name(self, client: AsyncClient, admin_user, seeded):
        response = await client.patch(
            f"/api/v1/access/roles/{seeded['Executive'].id}", json={"name": "User"}, headers=token_headers(admin_user)
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"] == "Role 'User' already exists"

    async def test_administrator_role_can_not_be_deleted(self, client: AsyncClient, admin_user, seeded):
        response = await client.delete(
            f"/api/v1/access/roles/{seeded['Administrator'].id}", headers=token_headers(admin_user)
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_executive_can_not_manage_roles(self, client: AsyncClient, executive_user):
        response = await client.get("/api/v1/access/roles/", headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestPermissionsApi:
    """Permission catalogue endpoints"""

    async def test_groups_tree(self, client: AsyncClient, admin_user):
        headers = token_headers(admin_user)
        roots = (await client.get("/api/v1/access/permissions/groups", headers=headers)).json()
        assert sorted(group["name"] for group in roots) == ["Access", "Blog"]

        blog = next(group for group in roots if group["name"] == "Blog")
        children = (await client.get(
            "/api/v1/access/permissions/groups", params={"parent_id": blog["id"]}, headers=headers
        )).json()
        assert sorted(group["name"] for group in children) == ["Categories", "Posts", "Tags"]

    async def test_permission_dependencies(self, client: AsyncClient, admin_user):
        headers = token_headers(admin_user)
        permissions = (await client.get("/api/v1/access/permissions/", headers=headers)).json()
        by_name = {permission["name"]: permission for permission in permissions}

        response = await client.get(f"/api/v1/access/permissions/{by_name['blog.post.edit']['id']}", headers=headers)
        assert response.json()["dependencies"] == [by_name["blog.post.view-management"]["id"]]


@pytest.mark.asyncio
class TestUserRolesApi:
    """Assigning roles to users"""

    async def test_replace_user_roles(self, client: AsyncClient, admin_user, plain_user, seeded):
        headers = token_headers(admin_user)
        url = f"/api/v1/access/users/{plain_user.id}/roles"

        assert (await client.get(url, headers=headers)).json()["roles"] == [seeded["User"].id]

        response = await client.put(url, json={"roles": [seeded["Executive"].id]}, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"user_id": plain_user.id, "roles": [seeded["Executive"].id]}

        # the new role takes effect on the next request
        response = await client.get("/api/v1/blog/posts/", headers=token_headers(plain_user))
        assert response.status_code == status.HTTP_200_OK

    async def test_unknown_user(self, client: AsyncClient, admin_user):
        response = await client.get("/api/v1/access/users/999/roles", headers=token_headers(admin_user))
        assert response.status_code == status.HTTP_404_NOT_FOUND
