"""HTTP API: tenant settings endpoints and the public storefront."""

import uuid

import pytest
from httpx import AsyncClient

from storefront.core.security import create_access_token

SETTINGS_URL = "/api/v1/tenants/me/store/settings"

pytestmark = pytest.mark.integration


async def test_requires_bearer_token(client: AsyncClient):
    resp = await client.get(SETTINGS_URL)
    assert resp.status_code == 401
    assert resp.headers["content-type"].startswith("application/problem+json")


async def test_rejects_invalid_token(client: AsyncClient):
    resp = await client.get(SETTINGS_URL, headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_rejects_expired_token(client: AsyncClient):
    token = create_access_token(sub="s", tenant_id=uuid.uuid4(), expires_in=-60)
    resp = await client.get(SETTINGS_URL, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_get_creates_defaults(client: AsyncClient, headers: dict):
    resp = await client.get(SETTINGS_URL, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["template"] == "pro"
    assert body["store_slug"].startswith("store-")


async def test_put_updates_and_switches(client: AsyncClient, headers: dict):
    resp = await client.put(
        SETTINGS_URL,
        json={"store_name": "Dune Shop", "template_hero_heading": "Sale", "foo_bar": 42},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["store_name"] == "Dune Shop"
    assert body["foo_bar"] == 42

    resp = await client.put(
        SETTINGS_URL, json={"__templateSwitch": {"toTemplate": "beauty"}}, headers=headers
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["template"] == "beauty"
    assert body["store_name"] == "Dune Shop"
    assert body["template_hero_heading"] is None
    assert "foo_bar" not in body

    resp = await client.get(SETTINGS_URL, headers=headers)
    assert resp.json()["template"] == "beauty"


async def test_validation_error_is_problem_json(client: AsyncClient, headers: dict):
    resp = await client.put(SETTINGS_URL, json={"primary_color": "blue"}, headers=headers)
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["code"] == "validation_error"
    assert body["status"] == 422
    assert body["errors"][0]["field"] == "primary_color"


async def test_non_object_body_is_rejected(client: AsyncClient, headers: dict):
    resp = await client.put(SETTINGS_URL, json=["store_name"], headers=headers)
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


async def test_disallowed_template_is_forbidden(client: AsyncClient, headers: dict):
    resp = await client.put(
        SETTINGS_URL, json={"__templateSwitch": {"toTemplate": "retro"}}, headers=headers
    )
    assert resp.status_code == 403
    body = resp.json()
    assert body["code"] == "template_not_allowed"
    assert body["title"] == "Template Not Allowed"

    resp = await client.get(SETTINGS_URL, headers=headers)
    assert resp.json()["template"] == "pro"


async def test_tenants_are_isolated(client: AsyncClient, headers: dict):
    await client.put(SETTINGS_URL, json={"store_name": "Mine"}, headers=headers)
    other = {"Authorization": f"Bearer {create_access_token('o', uuid.uuid4())}"}
    resp = await client.get(SETTINGS_URL, headers=other)
    assert resp.json()["store_name"] is None


async def test_public_settings_and_page(client: AsyncClient, headers: dict):
    doc = {"version": 1, "layout": {"hero": {"imageHeight": 200, "imageHeightMd": 400}}}
    resp = await client.put(
        SETTINGS_URL,
        json={"store_name": "Dune Shop", "owner_email": "me@dune.test", "page_document": doc},
        headers=headers,
    )
    slug = resp.json()["store_slug"]

    resp = await client.get(f"/api/v1/storefront/{slug}/settings")
    assert resp.status_code == 200
    body = resp.json()
    assert body["store_name"] == "Dune Shop"
    assert "owner_email" not in body

    resp = await client.get(f"/api/v1/storefront/{slug}/page", params={"width": 800})
    assert resp.status_code == 200
    page = resp.json()
    assert page["breakpoint"] == "tablet"
    assert page["version"] == 2
    assert page["layout"]["hero"]["imageHeight"] == 400

    resp = await client.get(f"/api/v1/storefront/{slug}/page")
    assert resp.json()["breakpoint"] == "desktop"


async def test_public_unknown_slug_is_404(client: AsyncClient):
    resp = await client.get("/api/v1/storefront/store-nothere/settings")
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/problem+json")

    resp = await client.get("/api/v1/storefront/store-nothere/page")
    assert resp.status_code == 404


async def test_request_id_is_echoed(client: AsyncClient, headers: dict):
    resp = await client.get(SETTINGS_URL, headers={**headers, "X-Request-Id": "req-123"})
    assert resp.headers["x-request-id"] == "req-123"


async def test_blank_template_id_is_a_validation_error(client: AsyncClient, headers: dict):
    resp = await client.put(
        SETTINGS_URL, json={"__templateSwitch": {"toTemplate": "   "}}, headers=headers
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"
