"""
Shared pytest fixtures for the quote backend tests.

- environment for ``app.core.config`` (set before any app import)
- an in-memory aiosqlite database per test
- an ``AsyncMock`` platform client routed by GraphQL document
- quote factory
"""

import os

os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from app.core.db import Base, build_engine, build_sessionmaker
from app.integrations.shopify.client import ShopifyClient
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote, QuoteItem

STORE = "acme.myshopify.com"
CUSTOMER = "gid://shopify/Customer/1001"
OTHER_CUSTOMER = "gid://shopify/Customer/2002"
LOCATION = "gid://shopify/CompanyLocation/301"


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:", "sqlite", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
def shopify() -> AsyncMock:
    """
    Platform client mock.

    Tests register responses per GraphQL document in ``shopify.responses``;
    unregistered documents answer with an empty ``data`` object.
    """
    mock = AsyncMock(spec=ShopifyClient)
    mock.responses = {}

    async def respond(document, store_name, variables=None):
        response = mock.responses.get(document, {})
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(variables or {})
        return response

    mock.query.side_effect = respond
    mock.mutation.side_effect = respond
    return mock


def future(days: int = 7) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def past(days: int = 1) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.fixture
def make_quote(db: AsyncSession) -> Callable:
    async def _make(
        status: QuoteStatus = QuoteStatus.SUBMITTED,
        customer_id: str = CUSTOMER,
        company_location_id: str | None = LOCATION,
        expiration_date: datetime | None = None,
        items: list[dict] | None = None,
        po_number: str | None = None,
        store_name: str = STORE,
    ) -> Quote:
        items = items if items is not None else [
            {"variant_id": "gid://shopify/ProductVariant/11", "quantity": 2, "offer_price": "90.00"},
        ]
        quote = Quote(
            store_name=store_name,
            status=status,
            customer_id=customer_id,
            company_location_id=company_location_id,
            currency_code="USD",
            po_number=po_number,
            expiration_date=expiration_date if expiration_date is not None else future(),
            subtotal=sum(
                (Decimal(i["offer_price"]) * i["quantity"] for i in items),
                Decimal("0.00"),
            ),
            created_by=customer_id,
            items=[
                QuoteItem(
                    product_id=i.get("product_id", "gid://shopify/Product/1"),
                    variant_id=i["variant_id"],
                    quantity=i["quantity"],
                    original_price=Decimal(i.get("original_price", "100.00")),
                    offer_price=Decimal(i["offer_price"]),
                )
                for i in items
            ],
        )
        db.add(quote)
        await db.commit()
        return quote

    return _make


async def reload(db: AsyncSession, quote_id: int) -> Quote | None:
    result = await db.execute(
        select(Quote)
        .where(Quote.id == quote_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
