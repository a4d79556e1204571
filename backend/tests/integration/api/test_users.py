"""
Integration tests for the users API.

WHAT: Tests user CRUD operations via HTTP.

WHY: Verifies status codes, the response envelope, the camelCase record
shape, and that DAO errors reach clients in the standard error format.

HOW: Uses pytest-asyncio with AsyncClient over ASGITransport.
"""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import UserFactory


class TestCreateUser:
    """Integration tests for POST /api/users."""

    @pytest.mark.asyncio
    async def test_create_user(self, client: AsyncClient, sample_user_data):
        response = await client.post("/api/users", json=sample_user_data)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["meta"]["path"] == "/api/users"
        assert body["meta"]["method"] == "POST"

        data = body["data"]
        assert uuid.UUID(data["_id"])
        assert data["name"] == "Ada Lovelace"
        assert data["email"] == "ada@example.com"
        assert data["age"] == 36
        assert data["isActive"] is True
        assert data["tags"] == ["math", "engines"]
        assert "createdAt" in data
        assert "updatedAt" in data
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_create_user_duplicate_email(
        self, client: AsyncClient, db_session: AsyncSession, sample_user_data
    ):
        await UserFactory.create(db_session, email="ada@example.com")

        response = await client.post(
            "/api/users", json={**sample_user_data, "email": "ADA@example.com"}
        )

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "User with email 'ada@example.com' already exists"

        listing = await client.get("/api/users")
        assert len(listing.json()["data"]) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"age": 121}, "age"),
            ({"age": -1}, "age"),
            ({"name": "A"}, "name"),
            ({"name": "x" * 51}, "name"),
            ({"email": "not-an-email"}, "email"),
        ],
    )
    async def test_create_user_invalid_input(
        self, client: AsyncClient, sample_user_data, overrides, field
    ):
        """Test out-of-range input is rejected before reaching the store."""
        response = await client.post("/api/users", json={**sample_user_data, **overrides})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert [e["field"] for e in body["errors"]] == [field]

    @pytest.mark.asyncio
    async def test_create_user_rejects_unknown_fields(self, client: AsyncClient, sample_user_data):
        response = await client.post("/api/users", json={**sample_user_data, "role": "admin"})

        assert response.status_code == 400


class TestListUsers:
    """Integration tests for GET /api/users."""

    @pytest.mark.asyncio
    async def test_list_active_users(self, client: AsyncClient, db_session: AsyncSession):
        await UserFactory.create_batch(db_session, 3)
        await UserFactory.create(db_session, is_active=False)

        response = await client.get("/api/users")

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 3
        assert "pagination" not in body

    @pytest.mark.asyncio
    async def test_list_users_paginated(self, client: AsyncClient, db_session: AsyncSession):
        users = await UserFactory.create_batch(db_session, 12)

        response = await client.get("/api/users", params={"page": 2, "limit": 5})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 5
        assert body["pagination"] == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}
        # Newest first: page 2 starts at the 6th newest
        assert body["data"][0]["_id"] == users[-6].id

    @pytest.mark.asyncio
    async def test_list_users_limit_only(self, client: AsyncClient, db_session: AsyncSession):
        await UserFactory.create_batch(db_session, 4)

        response = await client.get("/api/users", params={"limit": 3})

        body = response.json()
        assert body["pagination"]["page"] == 1
        assert body["pagination"]["totalPages"] == 2
        assert len(body["data"]) == 3

    @pytest.mark.asyncio
    async def test_list_users_invalid_page(self, client: AsyncClient):
        response = await client.get("/api/users", params={"page": 0})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "page"


class TestGetUser:
    """Integration tests for GET /api/users/{id}."""

    @pytest.mark.asyncio
    async def test_get_user(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session, name="Grace Hopper")

        response = await client.get(f"/api/users/{user.id}")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Grace Hopper"

    @pytest.mark.asyncio
    async def test_get_user_uppercase_id(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session)

        response = await client.get(f"/api/users/{user.id.upper()}")

        assert response.status_code == 200
        assert response.json()["data"]["_id"] == user.id

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/users/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_get_user_malformed_id(self, client: AsyncClient):
        response = await client.get("/api/users/not-a-valid-id")

        assert response.status_code == 400
        body = response.json()
        assert body["errors"] == [
            {"field": "id", "message": "Invalid user ID format", "value": "not-a-valid-id"}
        ]


class TestUpdateUser:
    """Integration tests for PUT/PATCH /api/users/{id}."""

    @pytest.mark.asyncio
    async def test_put_updates_fields(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session, name="Before", age=30)

        response = await client.put(f"/api/users/{user.id}", json={"name": "After"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "After"
        assert data["age"] == 30

    @pytest.mark.asyncio
    async def test_patch_accepts_camel_case_is_active(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        user = await UserFactory.create(db_session)

        response = await client.patch(f"/api/users/{user.id}", json={"isActive": False})

        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is False

    @pytest.mark.asyncio
    async def test_update_email_conflict(self, client: AsyncClient, db_session: AsyncSession):
        await UserFactory.create(db_session, email="taken@example.com")
        user = await UserFactory.create(db_session, email="mine@example.com")

        response = await client.patch(f"/api/users/{user.id}", json={"email": "taken@example.com"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_update_email_to_own_value(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session, email="mine@example.com")

        response = await client.put(f"/api/users/{user.id}", json={"email": "mine@example.com"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_update_missing_user(self, client: AsyncClient):
        response = await client.put(f"/api/users/{uuid.uuid4()}", json={"name": "Ghost"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_invalid_age(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session)

        response = await client.patch(f"/api/users/{user.id}", json={"age": 500})

        assert response.status_code == 400


class TestDeleteUser:
    """Integration tests for DELETE and deactivate."""

    @pytest.mark.asyncio
    async def test_delete_user(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session)

        response = await client.delete(f"/api/users/{user.id}")

        assert response.status_code == 204
        assert response.content == b""
        follow_up = await client.get(f"/api/users/{user.id}")
        assert follow_up.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, client: AsyncClient):
        response = await client.delete(f"/api/users/{uuid.uuid4()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_deactivate_user(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session)

        response = await client.post(f"/api/users/{user.id}/deactivate")

        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is False
        listing = await client.get("/api/users")
        assert listing.json()["data"] == []
        still_there = await client.get(f"/api/users/{user.id}")
        assert still_there.status_code == 200


class TestGetUserByEmail:
    """Integration tests for GET /api/users/email/{email}."""

    @pytest.mark.asyncio
    async def test_get_by_email(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session, email="find@example.com")

        response = await client.get("/api/users/email/find@example.com")

        assert response.status_code == 200
        assert response.json()["data"]["_id"] == user.id

    @pytest.mark.asyncio
    async def test_get_by_email_absent_returns_null(self, client: AsyncClient):
        response = await client.get("/api/users/email/nobody@example.com")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_get_by_email_inactive_returns_null(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        await UserFactory.create(db_session, email="gone@example.com", is_active=False)

        response = await client.get("/api/users/email/gone@example.com")

        assert response.json()["data"] is None


class TestHealth:
    """Integration tests for the health and root endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == {"status": "connected", "connected": True}

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.json()["users"] == "/api/users"
