"""End-to-end flow over HTTP: create, share, attempt delete, delete."""
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_headers, member_count, register_principal


@pytest.mark.asyncio
async def test_acme_lifecycle(client: AsyncClient, db: AsyncSession):
    alice = await register_principal(db, "Alice")
    bob = await register_principal(db, "Bob")
    alice_headers = auth_headers(alice)
    bob_headers = auth_headers(bob)

    # A creates "acme" and becomes owner
    response = await client.post(
        "/api/organizations",
        json={"name": "Acme", "slug": "acme"},
        headers=alice_headers,
    )
    assert response.status_code == 201
    org_id = UUID(response.json()["id"])

    response = await client.get(f"/api/organizations/{org_id}/role", headers=alice_headers)
    assert response.json()["role"] == "owner"

    # A adds B as member
    response = await client.post(
        f"/api/organizations/{org_id}/members",
        json={"principal_id": str(bob), "role": "member"},
        headers=alice_headers,
    )
    assert response.status_code == 201

    response = await client.get("/api/organizations/acme", headers=bob_headers)
    assert response.status_code == 200

    # B cannot delete the organization
    response = await client.delete(f"/api/organizations/{org_id}", headers=bob_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "not_authorized"

    # A deletes it
    response = await client.delete(f"/api/organizations/{org_id}", headers=alice_headers)
    assert response.status_code == 204

    assert await member_count(db, org_id) == 0

    # B's access is gone
    response = await client.get("/api/organizations/acme", headers=bob_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"

    response = await client.get("/api/organizations", headers=bob_headers)
    assert response.json() == []
