"""
Tests for ShopifyClient.

Uses respx to mock the Admin GraphQL endpoint.
"""

import json

import httpx
import pytest
import respx

from app.constants.error_codes import ErrorCode
from app.core.exceptions import ShopifyError
from app.integrations.shopify.client import ShopifyClient
from app.integrations.shopify.queries import GET_CUSTOMER_EMAIL

STORE = "acme.myshopify.com"
ENDPOINT = f"https://{STORE}/admin/api/2025-01/graphql.json"


@pytest.fixture
def client() -> ShopifyClient:
    return ShopifyClient(access_token="shpat_test", api_version="2025-01", timeout=5)


class TestShopifyClient:

    def test_endpoint_uses_store_and_version(self, client):
        assert client.endpoint(STORE) == ENDPOINT

    @pytest.mark.asyncio
    @respx.mock
    async def test_query_returns_data(self, client):
        route = respx.post(ENDPOINT).mock(
            return_value=httpx.Response(200, json={"data": {"customer": {"email": "ada@acme.test"}}})
        )

        data = await client.query(GET_CUSTOMER_EMAIL, STORE, {"customerId": "gid://shopify/Customer/1"})

        assert data == {"customer": {"email": "ada@acme.test"}}
        request = route.calls.last.request
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        assert json.loads(request.content) == {
            "query": GET_CUSTOMER_EMAIL,
            "variables": {"customerId": "gid://shopify/Customer/1"},
        }
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_graphql_errors_raise(self, client):
        respx.post(ENDPOINT).mock(
            return_value=httpx.Response(200, json={"errors": [{"message": "Throttled"}], "data": None})
        )

        with pytest.raises(ShopifyError) as exc_info:
            await client.query(GET_CUSTOMER_EMAIL, STORE)

        assert exc_info.value.status_code == 502
        assert exc_info.value.error_code == ErrorCode.PLATFORM_REQUEST_FAILED
        assert exc_info.value.message == "Shopify GraphQL error: Throttled"
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_status_raises(self, client):
        respx.post(ENDPOINT).mock(return_value=httpx.Response(503))

        with pytest.raises(ShopifyError) as exc_info:
            await client.query(GET_CUSTOMER_EMAIL, STORE)

        assert exc_info.value.message == "Shopify request failed with status 503"
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_raises(self, client):
        respx.post(ENDPOINT).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(ShopifyError) as exc_info:
            await client.query(GET_CUSTOMER_EMAIL, STORE)

        assert "connection refused" in exc_info.value.message
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_retry_on_failure(self, client):
        route = respx.post(ENDPOINT).mock(return_value=httpx.Response(500))

        with pytest.raises(ShopifyError):
            await client.mutation(GET_CUSTOMER_EMAIL, STORE)

        assert route.call_count == 1
        await client.close()
