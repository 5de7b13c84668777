"""HTTP API behaviour tests."""

import pytest
from httpx import AsyncClient

from shortener.alias import ALPHABET


@pytest.mark.asyncio
async def test_save_with_alias(client: AsyncClient, auth) -> None:
    response = await client.post("/url", json={"url": "https://example.com", "alias": "ex1"}, auth=auth)
    assert response.status_code == 200
    assert response.json() == {"status": "OK", "alias": "ex1"}


@pytest.mark.asyncio
async def test_save_duplicate_alias(client: AsyncClient, auth) -> None:
    await client.post("/url", json={"url": "https://example.com", "alias": "ex1"}, auth=auth)
    response = await client.post("/url", json={"url": "https://other.com", "alias": "ex1"}, auth=auth)
    assert response.status_code == 409
    assert response.json() == {"status": "Error", "error": "url already exists"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"url": "https://example.com"}, {"url": "https://example.com", "alias": ""}])
async def test_save_generates_alias(client: AsyncClient, auth, body) -> None:
    response = await client.post("/url", json=body, auth=auth)
    assert response.status_code == 200
    alias = response.json()["alias"]
    assert len(alias) == 6
    assert all(c in ALPHABET for c in alias)


@pytest.mark.asyncio
async def test_save_requires_credentials(client: AsyncClient) -> None:
    response = await client.post("/url", json={"url": "https://example.com"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_save_rejects_wrong_password(client: AsyncClient, auth) -> None:
    response = await client.post("/url", json={"url": "https://example.com"}, auth=(auth[0], "wrong"))
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Basic"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["not-a-url", "", "example.com"])
async def test_save_invalid_url(client: AsyncClient, auth, url: str) -> None:
    response = await client.post("/url", json={"url": url}, auth=auth)
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize("alias", ["my-code!", "with space", "ünï", "a" * 65])
async def test_save_invalid_alias(client: AsyncClient, auth, alias: str) -> None:
    response = await client.post("/url", json={"url": "https://example.com", "alias": alias}, auth=auth)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_redirect(client: AsyncClient, auth) -> None:
    await client.post("/url", json={"url": "https://example.com/target?q=1", "alias": "go1"}, auth=auth)
    response = await client.get("/go1", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "https://example.com/target?q=1"


@pytest.mark.asyncio
async def test_redirect_is_public(client: AsyncClient, auth) -> None:
    response = await client.post("/url", json={"url": "https://example.com"}, auth=auth)
    alias = response.json()["alias"]
    response = await client.get(f"/{alias}", follow_redirects=False)
    assert response.status_code == 302


@pytest.mark.asyncio
async def test_redirect_unknown_alias(client: AsyncClient) -> None:
    response = await client.get("/missing", follow_redirects=False)
    assert response.status_code == 404
    assert response.json() == {"status": "Error", "error": "not found"}


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy"}


@pytest.mark.asyncio
async def test_metrics_exposes_store_counters(client: AsyncClient, auth) -> None:
    await client.post("/url", json={"url": "https://example.com", "alias": "m1"}, auth=auth)
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "url_shortener_save_requests_total" in response.text


@pytest.mark.asyncio
async def test_request_id_header_is_accepted(client: AsyncClient, auth) -> None:
    response = await client.post(
        "/url",
        json={"url": "https://example.com", "alias": "rid1"},
        auth=auth,
        headers={"X-Request-ID": "trace-123"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_metrics_records_http_requests(client: AsyncClient) -> None:
    await client.get("/health")
    await client.get("/missing", follow_redirects=False)
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert 'handler="/health"' in response.text
    assert 'handler="/{alias}"' in response.text
