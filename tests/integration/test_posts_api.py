import pytest
from fastapi import status
from httpx import AsyncClient
from tests.conftest import token_headers

POSTS = "/api/v1/blog/posts/"


@pytest.mark.asyncio
class TestPostsApi:
    """Blog posts endpoints"""

    async def test_list_with_filters_and_sort(self, client: AsyncClient, blog, executive_user):
        headers = token_headers(executive_user)

        response = await client.get(POSTS, params={"sort_by": "name", "sort_order": "asc"}, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 3
        assert [post["slug"] for post in data["data"]] == ["alpha", "beta", "gamma"]

        response = await client.get(POSTS, params={"tag": "python", "active": True}, headers=headers)
        assert sorted(post["slug"] for post in response.json()["data"]) == ["alpha", "beta"]

        response = await client.get(POSTS, params={"search": "draft"}, headers=headers)
        assert [post["slug"] for post in response.json()["data"]] == ["gamma"]

    async def test_pagination(self, client: AsyncClient, blog, executive_user):
        response = await client.get(
            POSTS, params={"page_index": 2, "page_size": 2, "sort_by": "name"}, headers=token_headers(executive_user)
        )
        data = response.json()
        assert data["page_index"] == 2
        assert data["page_size"] == 2
        assert [post["slug"] for post in data["data"]] == ["gamma"]

    async def test_trashed_scope(self, client: AsyncClient, blog, executive_user):
        response = await client.get(POSTS, params={"trashed": "only"}, headers=token_headers(executive_user))
        assert [post["slug"] for post in response.json()["data"]] == ["delta"]

    async def test_get_post_includes_tags(self, client: AsyncClient, blog, executive_user):
        beta = blog["posts"]["beta"]
        response = await client.get(f"{POSTS}{beta.id}", headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_200_OK
        assert sorted(response.json()["tags"]) == sorted([blog["tags"]["python"].id, blog["tags"]["sql"].id])

    async def test_get_missing_post(self, client: AsyncClient, blog, executive_user):
        response = await client.get(f"{POSTS}999", headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_create_post(self, client: AsyncClient, blog, executive_user):
        payload = {
            "name": "Epsilon",
            "slug": "epsilon",
            "body": "New",
            "category": blog["categories"]["tech"].id,
            "tags": [blog["tags"]["sql"].id],
        }
        response = await client.post(POSTS, json=payload, headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["category_id"] == blog["categories"]["tech"].id
        assert data["tags"] == [blog["tags"]["sql"].id]

    async def test_create_duplicate_slug(self, client: AsyncClient, blog, executive_user):
        response = await client.post(POSTS, json={"name": "Again", "slug": "alpha"}, headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_patch_duplicate_slug(self, client: AsyncClient, blog, executive_user):
        beta = blog["posts"]["beta"]
        response = await client.patch(f"{POSTS}{beta.id}", json={"slug": "delta"}, headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"] == "Post slug 'delta' is already in use"

    async def test_patch_unknown_category_keeps_current_one(self, client: AsyncClient, blog, executive_user):
        beta = blog["posts"]["beta"]
        response = await client.patch(f"{POSTS}{beta.id}", json={"category": 999}, headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["category_id"] == blog["categories"]["tech"].id

    async def test_patch_keeps_tags(self, client: AsyncClient, blog, executive_user):
        beta = blog["posts"]["beta"]
        response = await client.patch(f"{POSTS}{beta.id}", json={"name": "Beta 2"}, headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Beta 2"
        assert len(response.json()["tags"]) == 2

    async def test_put_clears_omitted_tags(self, client: AsyncClient, blog, executive_user):
        beta = blog["posts"]["beta"]
        response = await client.put(
            f"{POSTS}{beta.id}", json={"name": "Beta", "slug": "beta"}, headers=token_headers(executive_user)
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["tags"] == []
        assert response.json()["category_id"] == blog["categories"]["tech"].id

    async def test_delete_restore_and_permanent_delete(self, client: AsyncClient, blog, admin_user):
        headers = token_headers(admin_user)
        alpha = blog["posts"]["alpha"]

        response = await client.delete(f"{POSTS}{alpha.id}/permanent", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

        assert (await client.delete(f"{POSTS}{alpha.id}", headers=headers)).status_code == 200
        assert (await client.get(f"{POSTS}{alpha.id}", headers=headers)).status_code == 404

        response = await client.post(f"{POSTS}{alpha.id}/restore", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["deleted_at"] is None

        assert (await client.delete(f"{POSTS}{alpha.id}", headers=headers)).status_code == 200
        assert (await client.delete(f"{POSTS}{alpha.id}/permanent", headers=headers)).status_code == 200
        response = await client.get(POSTS, params={"trashed": "with"}, headers=headers)
        assert alpha.slug not in [post["slug"] for post in response.json()["data"]]


@pytest.mark.asyncio
class TestPostsApiPermissions:
    """Each action is gated by its own permission"""

    async def test_executive_can_not_restore(self, client: AsyncClient, blog, executive_user):
        delta = blog["posts"]["delta"]
        response = await client.post(f"{POSTS}{delta.id}/restore", headers=token_headers(executive_user))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_plain_user_can_not_list(self, client: AsyncClient, blog, plain_user):
        response = await client.get(POSTS, headers=token_headers(plain_user))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.text == "Unauthorized."

    async def test_direct_permission_is_enough(self, client: AsyncClient, blog, make_user, seeded):
        user = await make_user(permissions=["blog.post.view-management"])
        response = await client.get(POSTS, headers=token_headers(user))
        assert response.status_code == status.HTTP_200_OK

    async def test_anonymous_browser_is_redirected(self, client: AsyncClient, blog, seeded):
        response = await client.get(POSTS, headers={"Accept": "text/html"})
        assert response.status_code == status.HTTP_302_FOUND
