"""Contract tests for health, metrics and cross-cutting response headers."""
import pytest
from httpx import AsyncClient

from tests.conftest import OrgFixture, auth_headers


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_security_headers(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
async def test_metrics_count_membership_outcomes(client: AsyncClient, acme: OrgFixture):
    await client.post(
        f"/api/organizations/{acme.org_id}/leave", headers=auth_headers(acme.owner_id)
    )

    response = await client.get("/api/metrics")

    assert response.status_code == 200
    body = response.text
    assert "tenancy_membership_mutations_total" in body
    assert 'outcome="must_transfer_ownership"' in body
    assert "tenancy_http_requests_total" in body
