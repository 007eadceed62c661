"""Contract tests for organization endpoints."""
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import OrgFixture, auth_headers, register_principal


@pytest.mark.asyncio
async def test_create_organization_success(client: AsyncClient, db: AsyncSession):
    """Test POST /organizations creates an organization owned by the caller.

    Contract: POST /organizations
    - Request: { name, slug, logo_url? }
    - Response: 201 { id, name, slug, logo_url, created_at, updated_at }
    """
    principal_id = await register_principal(db)

    response = await client.post(
        "/api/organizations",
        json={"name": "Acme Inc", "slug": "Acme", "logo_url": "https://cdn.test/acme.png"},
        headers=auth_headers(principal_id),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Acme Inc"
    assert data["slug"] == "acme"
    assert data["logo_url"] == "https://cdn.test/acme.png"
    assert "id" in data
    assert "created_at" in data

    me = await client.get("/api/me", headers=auth_headers(principal_id))
    assert me.json()["active_organization_id"] == data["id"]


@pytest.mark.asyncio
async def test_create_organization_requires_authentication(client: AsyncClient):
    response = await client.post("/api/organizations", json={"name": "Acme", "slug": "acme"})

    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_create_organization_rejects_invalid_token(client: AsyncClient):
    response = await client.post(
        "/api/organizations",
        json={"name": "Acme", "slug": "acme"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_organization_slug_conflict(
    client: AsyncClient, db: AsyncSession, acme: OrgFixture, outsider
):
    response = await client.post(
        "/api/organizations",
        json={"name": "Other Acme", "slug": "acme"},
        headers=auth_headers(outsider),
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "slug_conflict"
    assert body["message"] == "An organization with this slug already exists"


@pytest.mark.asyncio
async def test_create_organization_validation_error(client: AsyncClient, outsider):
    response = await client.post(
        "/api/organizations",
        json={"name": "Acme", "slug": "a!"},
        headers=auth_headers(outsider),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "validation_error"
    assert "slug" in body["details"]


@pytest.mark.asyncio
async def test_list_my_organizations(client: AsyncClient, acme: OrgFixture):
    response = await client.get("/api/organizations", headers=auth_headers(acme.admin_id))

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["slug"] == "acme"
    assert data[0]["role"] == "admin"


@pytest.mark.asyncio
async def test_slug_availability(client: AsyncClient, acme: OrgFixture):
    headers = auth_headers(acme.member_id)

    taken = await client.get(
        "/api/organizations/slug-availability", params={"slug": "ACME"}, headers=headers
    )
    free = await client.get(
        "/api/organizations/slug-availability", params={"slug": "globex"}, headers=headers
    )

    assert taken.json() == {"slug": "acme", "available": False}
    assert free.json() == {"slug": "globex", "available": True}


@pytest.mark.asyncio
async def test_get_organization_by_id_and_slug(client: AsyncClient, acme: OrgFixture):
    headers = auth_headers(acme.member_id)

    by_id = await client.get(f"/api/organizations/{acme.org_id}", headers=headers)
    by_slug = await client.get("/api/organizations/acme", headers=headers)

    assert by_id.status_code == 200
    assert by_slug.status_code == 200
    assert by_id.json()["id"] == by_slug.json()["id"] == str(acme.org_id)


@pytest.mark.asyncio
async def test_get_organization_hidden_from_outsider(
    client: AsyncClient, acme: OrgFixture, outsider
):
    response = await client.get(f"/api/organizations/{acme.org_id}", headers=auth_headers(outsider))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_organization(client: AsyncClient, acme: OrgFixture):
    response = await client.patch(
        f"/api/organizations/{acme.org_id}",
        json={"name": "Acme Corporation"},
        headers=auth_headers(acme.admin_id),
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Acme Corporation"
    assert response.json()["slug"] == "acme"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "slug"])
async def test_update_organization_rejects_null_field(
    client: AsyncClient, acme: OrgFixture, field: str
):
    response = await client.patch(
        f"/api/organizations/{acme.org_id}",
        json={field: None},
        headers=auth_headers(acme.owner_id),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "validation_error"
    assert list(body["details"]) == [field]


@pytest.mark.asyncio
async def test_update_organization_clears_logo(client: AsyncClient, acme: OrgFixture):
    headers = auth_headers(acme.owner_id)
    await client.patch(
        f"/api/organizations/{acme.org_id}", json={"logo_url": "logo.png"}, headers=headers
    )

    response = await client.patch(
        f"/api/organizations/{acme.org_id}", json={"logo_url": None}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["logo_url"] is None
    assert response.json()["name"] == "Acme Inc"


@pytest.mark.asyncio
async def test_update_organization_forbidden_for_member(client: AsyncClient, acme: OrgFixture):
    response = await client.patch(
        f"/api/organizations/{acme.org_id}",
        json={"name": "Hacked"},
        headers=auth_headers(acme.member_id),
    )

    assert response.status_code == 403
    assert response.json()["error"] == "not_authorized"


@pytest.mark.asyncio
async def test_delete_organization(client: AsyncClient, acme: OrgFixture):
    response = await client.delete(
        f"/api/organizations/{acme.org_id}", headers=auth_headers(acme.owner_id)
    )

    assert response.status_code == 204
    follow_up = await client.get(
        f"/api/organizations/{acme.org_id}", headers=auth_headers(acme.owner_id)
    )
    assert follow_up.status_code == 404


@pytest.mark.asyncio
async def test_activate_and_role(client: AsyncClient, acme: OrgFixture, outsider):
    response = await client.post(
        f"/api/organizations/{acme.org_id}/activate", headers=auth_headers(acme.member_id)
    )
    assert response.status_code == 200
    assert response.json()["active_organization_id"] == str(acme.org_id)

    response = await client.post(
        f"/api/organizations/{acme.org_id}/activate", headers=auth_headers(outsider)
    )
    assert response.status_code == 404
    assert response.json()["error"] == "not_a_member"

    role = await client.get(f"/api/organizations/{acme.org_id}/role", headers=auth_headers(outsider))
    assert role.status_code == 200
    assert role.json() == {"role": None}


@pytest.mark.asyncio
async def test_leave_organization(client: AsyncClient, acme: OrgFixture):
    response = await client.post(
        f"/api/organizations/{acme.org_id}/leave", headers=auth_headers(acme.member_id)
    )

    assert response.status_code == 204


@pytest.mark.asyncio
async def test_leave_as_sole_owner(client: AsyncClient, acme: OrgFixture):
    response = await client.post(
        f"/api/organizations/{acme.org_id}/leave", headers=auth_headers(acme.owner_id)
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "must_transfer_ownership"
    assert "transfer ownership" in body["message"]


@pytest.mark.asyncio
async def test_leave_requires_authentication(client: AsyncClient, acme: OrgFixture):
    response = await client.post(f"/api/organizations/{acme.org_id}/leave")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_leave_unknown_organization(client: AsyncClient, acme: OrgFixture):
    response = await client.post(
        f"/api/organizations/{uuid4()}/leave", headers=auth_headers(acme.member_id)
    )

    assert response.status_code == 404
