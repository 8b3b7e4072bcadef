"""HTTP surface: camelCase bodies, success envelope and error mapping."""

import httpx
import pytest
import pytest_asyncio

from app.core.db import get_db
from app.integrations.shopify.client import get_shopify_client
from app.models.enums.quote_status import QuoteStatus
from main import app
from tests.conftest import CUSTOMER, LOCATION, OTHER_CUSTOMER, STORE, future, past

ITEM = {
    "productId": "gid://shopify/Product/1",
    "variantId": "gid://shopify/ProductVariant/11",
    "quantity": 2,
    "originalPrice": "100.00",
    "offerPrice": "90.00",
}


@pytest_asyncio.fixture
async def client(db, shopify):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_shopify_client] = lambda: shopify

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def _create_body(expiration):
    return {
        "storeName": STORE,
        "quote": {
            "customerId": CUSTOMER,
            "companyLocationId": LOCATION,
            "quoteItems": [ITEM],
            "expirationDate": expiration.isoformat(),
        },
    }


class TestQuoteRoutes:

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_create_quote(self, client):
        response = await client.post("/api/v1/quotes/create", json=_create_body(future()))

        assert response.status_code == 201
        body = response.json()
        assert body["code"] == 201
        assert body["message"] == "Quote created successfully"
        assert body["data"]["status"] == "Submitted"
        assert body["data"]["customerId"] == CUSTOMER
        assert body["data"]["quoteItems"][0]["variantId"] == ITEM["variantId"]

    @pytest.mark.asyncio
    async def test_create_quote_past_expiration(self, client):
        response = await client.post("/api/v1/quotes/create", json=_create_body(past()))

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "INVALID_EXPIRATION_DATE"
        assert body["message"] == "Expiration date must be in the future"

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, client):
        response = await client.post("/api/v1/quotes/create", json={"storeName": STORE})

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"]

    @pytest.mark.asyncio
    async def test_invalid_transition_maps_to_400(self, client, make_quote):
        quote = await make_quote(status=QuoteStatus.DECLINED)

        response = await client.post(
            "/api/v1/quotes/approve", json={"storeName": STORE, "quoteId": quote.id}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "QUOTE_INVALID_STATUS_TRANSITION"
        assert body["message"] == "Invalid status transition from Declined to Approved"

    @pytest.mark.asyncio
    async def test_unknown_quote_maps_to_404(self, client):
        response = await client.post(
            "/api/v1/quotes/cancel", json={"storeName": STORE, "quoteId": 404404}
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "QUOTE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_status_patch(self, client, make_quote):
        quote = await make_quote(status=QuoteStatus.SUBMITTED)

        response = await client.patch(
            f"/api/v1/quotes/{quote.id}/status",
            json={"status": "Approved", "actionBy": "admin@acme.test"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Approved"

    @pytest.mark.asyncio
    async def test_convert_non_approved_quote(self, client, shopify, make_quote):
        quote = await make_quote(status=QuoteStatus.SUBMITTED)

        response = await client.post(
            "/api/v1/quotes/convert-to-order", json={"storeName": STORE, "quoteId": quote.id}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "QUOTE_INVALID_STATUS_FOR_ORDER"
        shopify.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_scan_expired(self, client, make_quote):
        quote = await make_quote(status=QuoteStatus.APPROVED, expiration_date=past())

        response = await client.post("/api/v1/quotes/scan-expired")

        assert response.status_code == 200
        assert response.json()["data"]["expiredQuoteIds"] == [quote.id]


class TestDraftQuoteRoutes:

    @pytest.mark.asyncio
    async def test_bulk_delete_foreign_draft_forbidden(self, client, make_quote):
        theirs = await make_quote(status=QuoteStatus.DRAFT, customer_id=OTHER_CUSTOMER)

        response = await client.post(
            "/api/v1/draft-quotes/bulk-delete",
            json={"storeName": STORE, "customerId": CUSTOMER, "draftQuoteIds": [theirs.id]},
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "QUOTE_UNAUTHORIZED_ACCESS"

    @pytest.mark.asyncio
    async def test_create_then_submit(self, client):
        response = await client.post(
            "/api/v1/draft-quotes/create",
            json={
                "storeName": STORE,
                "draftQuote": {"customerId": CUSTOMER, "companyLocationId": LOCATION, "draftQuoteItems": [ITEM]},
            },
        )
        assert response.status_code == 201
        draft_id = response.json()["data"]["id"]

        response = await client.post(
            "/api/v1/draft-quotes/submit",
            json={"storeName": STORE, "customerId": CUSTOMER, "draftQuoteId": draft_id},
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Submitted"
