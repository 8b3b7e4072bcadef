import asyncio
import functools
from datetime import datetime, time, timezone
from typing import Iterable, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException, QuoteError
from app.integrations.shopify.client import ShopifyClient
from app.integrations.shopify.queries import (
    BATCH_GET_COMPANY_LOCATIONS,
    BATCH_GET_CUSTOMERS,
    BATCH_GET_VARIANT_PRICES,
    GET_COMPANY_LOCATION_ADDRESS,
    GET_COMPANY_LOCATION_BUYER_CONFIG,
    GET_CUSTOMER_EMAIL,
    SEARCH_CUSTOMERS,
)
from app.models.enums.quote_note_type import QuoteNoteType
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote, QuoteItem
from app.schemas.quotes.quote_schemas import (
    ApproveQuoteRequest,
    BulkDeleteDraftQuotesRequest,
    BulkDeleteQuotesRequest,
    CancelQuoteRequest,
    CompanyLocationDetails,
    ConvertQuoteToOrderRequest,
    ConvertToOrderData,
    CustomerInfo,
    DraftQuoteCreate,
    DraftQuoteDetailsRequest,
    DraftQuoteItemsUpdate,
    DraftQuoteListData,
    DraftQuoteOut,
    ExpireQuoteRequest,
    FetchDraftQuotesRequest,
    FetchQuotesRequest,
    QuoteCreate,
    QuoteDetailOut,
    QuoteDetailsRequest,
    QuoteFilter,
    QuoteItemDetailOut,
    QuoteItemIn,
    QuoteItemOut,
    QuoteItemsUpdate,
    QuoteListData,
    QuoteNoteOut,
    QuoteNoteUpdate,
    QuoteOut,
    QuoteSortItem,
    QuoteStatusUpdate,
    QuoteWithCustomerOut,
    RejectQuoteRequest,
    SubmitDraftQuoteRequest,
    VariantOut,
    VariantProductOut,
)
from app.services.orders.draft_order_service import create_draft_order
from app.services.orders.order_service import (
    create_direct_order,
    prepare_direct_order_input,
    prepare_draft_order_input,
)
from app.services.quotes.quote_transitions import validate_status_transition
from app.utils.decimal_utils import compute_subtotal
from app.utils.logger import get_logger
from app.utils.note_helpers import build_quote_note, emit_quote_note

logger = get_logger(__name__)

STATUS_NOTE_TYPES = {
    QuoteStatus.SUBMITTED: QuoteNoteType.SUBMITTED,
    QuoteStatus.APPROVED: QuoteNoteType.APPROVED,
    QuoteStatus.DECLINED: QuoteNoteType.DECLINED,
    QuoteStatus.CANCELLED: QuoteNoteType.CANCELLED,
    QuoteStatus.EXPIRED: QuoteNoteType.EXPIRED,
    QuoteStatus.ORDERED: QuoteNoteType.ORDERED,
}

SORT_COLUMNS = {
    "id": Quote.id,
    "customerId": Quote.customer_id,
    "companyLocationId": Quote.company_location_id,
    "subtotal": Quote.subtotal,
    "currencyCode": Quote.currency_code,
    "createdAt": Quote.created_at,
    "updatedAt": Quote.updated_at,
    "createdBy": Quote.created_by,
    "updatedBy": Quote.updated_by,
    "expirationDate": Quote.expiration_date,
}


def _logged(operation: str):
    """Log failures of a service call with context, then re-raise."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except AppException as exc:
                log = logger.error if exc.status_code >= 500 else logger.warning
                log(
                    f"{operation} failed",
                    extra={
                        "error_code": exc.error_code,
                        "error_message": exc.detail,
                        "status_code": exc.status_code,
                    },
                )
                raise
            except Exception:
                logger.exception(f"{operation} failed")
                raise

        return wrapper

    return decorator


# =====================================================
# HELPERS
# =====================================================

def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _validate_expiration(expiration_date: Optional[datetime]) -> datetime:
    expiration = _as_utc(expiration_date)
    if expiration is None or expiration <= datetime.now(timezone.utc):
        raise AppException(
            400,
            "Expiration date must be in the future",
            ErrorCode.INVALID_EXPIRATION_DATE,
        )
    return expiration


def _build_items(items: Iterable[QuoteItemIn]) -> list[QuoteItem]:
    return [
        QuoteItem(
            product_id=i.product_id,
            variant_id=i.variant_id,
            quantity=i.quantity,
            original_price=i.original_price,
            offer_price=i.offer_price,
            description=i.description,
        )
        for i in items
    ]


async def _get_quote_with_items(
    db: AsyncSession,
    quote_id: int,
    store_name: str | None = None,
) -> Quote:
    stmt = (
        select(Quote)
        .where(Quote.id == quote_id)
        .execution_options(populate_existing=True)
    )
    if store_name:
        stmt = stmt.where(Quote.store_name == store_name)

    result = await db.execute(stmt)
    quote = result.scalar_one_or_none()
    if not quote:
        raise QuoteError.not_found(quote_id)
    return quote


async def _get_owned_draft(
    db: AsyncSession,
    draft_quote_id: int,
    customer_id: str,
    store_name: str | None = None,
) -> Quote:
    try:
        quote = await _get_quote_with_items(db, draft_quote_id, store_name)
    except QuoteError:
        raise QuoteError.draft_not_found(draft_quote_id) from None

    if quote.status != QuoteStatus.DRAFT:
        raise QuoteError.draft_not_found(draft_quote_id)
    if quote.customer_id != customer_id:
        raise QuoteError.unauthorized_access(draft_quote_id)
    return quote


def _map_items(q: Quote) -> list[QuoteItemOut]:
    return [QuoteItemOut.model_validate(i) for i in q.items]


def _base_fields(q: Quote) -> dict:
    return dict(
        id=q.id,
        store_name=q.store_name,
        status=q.status,
        customer_id=q.customer_id,
        company_location_id=q.company_location_id,
        currency_code=q.currency_code,
        po_number=q.po_number,
        subtotal=q.subtotal,
        expiration_date=_as_utc(q.expiration_date),
        item_count=len(q.items),
        created_by=q.created_by,
        updated_by=q.updated_by,
        action_by=q.action_by,
        created_at=_as_utc(q.created_at),
        updated_at=_as_utc(q.updated_at),
        notes=[
            QuoteNoteOut(
                id=n.id,
                note_type=n.note_type,
                note_content=n.note_content,
                created_by=n.created_by,
                created_at=_as_utc(n.created_at),
            )
            for n in q.notes
        ],
    )


def _map_quote(q: Quote) -> QuoteOut:
    return QuoteOut(**_base_fields(q), quote_items=_map_items(q))


def _map_draft_quote(q: Quote) -> DraftQuoteOut:
    return DraftQuoteOut(**_base_fields(q), draft_quote_items=_map_items(q))


def _map_variant(node: dict) -> VariantOut:
    pricing = node.get("contextualPricing") or {}
    product = node.get("product") or {}
    return VariantOut(
        id=node["id"],
        title=node.get("title"),
        sku=node.get("sku"),
        inventory_quantity=node.get("inventoryQuantity"),
        metafield=node.get("metafield"),
        price=pricing.get("price"),
        quantity_rule=pricing.get("quantityRule"),
        image=node.get("image"),
        product=VariantProductOut(
            id=product.get("id"),
            title=product.get("title"),
            handle=product.get("handle"),
            images=(product.get("images") or {}).get("nodes"),
        ) if product else None,
    )


def _map_company_location(node: Optional[dict]) -> Optional[CompanyLocationDetails]:
    if not node:
        return None
    return CompanyLocationDetails.model_validate(node)


async def _transition_quote(
    db: AsyncSession,
    quote: Quote,
    new_status: QuoteStatus,
    actor: str | None,
    note: str | None = None,
) -> Quote:
    validate_status_transition(quote.status, new_status)

    quote.status = new_status
    quote.action_by = actor
    quote.updated_by = actor

    await emit_quote_note(
        db,
        quote_id=quote.id,
        note_type=STATUS_NOTE_TYPES[new_status],
        created_by=actor,
        content=note,
    )
    await db.commit()

    logger.info(
        "Quote status changed",
        extra={"quote_id": quote.id, "status": new_status.value, "action_by": actor},
    )
    return await _get_quote_with_items(db, quote.id)


# =====================================================
# CREATE
# =====================================================

@_logged("Create quote")
async def create_quote(
    db: AsyncSession,
    payload: QuoteCreate,
) -> QuoteOut:
    data = payload.quote
    logger.info(
        "Creating quote",
        extra={"store_name": payload.store_name, "customer_id": data.customer_id},
    )

    expiration = _validate_expiration(data.expiration_date)

    quote = Quote(
        store_name=payload.store_name,
        status=QuoteStatus.SUBMITTED,
        customer_id=data.customer_id,
        company_location_id=data.company_location_id,
        currency_code=data.currency_code,
        po_number=data.po_number,
        expiration_date=expiration,
        subtotal=compute_subtotal(data.quote_items),
        created_by=data.customer_id,
        updated_by=data.customer_id,
        items=_build_items(data.quote_items),
    )
    db.add(quote)
    await db.flush()

    if data.request_note and data.request_note.strip():
        await emit_quote_note(
            db,
            quote_id=quote.id,
            note_type=QuoteNoteType.SUBMITTED,
            created_by=data.customer_id,
            content=data.request_note,
        )

    await db.commit()

    logger.info("Quote created", extra={"quote_id": quote.id})
    return _map_quote(await _get_quote_with_items(db, quote.id))


@_logged("Create draft quote")
async def create_draft_quote(
    db: AsyncSession,
    payload: DraftQuoteCreate,
) -> DraftQuoteOut:
    data = payload.draft_quote

    quote = Quote(
        store_name=payload.store_name,
        status=QuoteStatus.DRAFT,
        customer_id=data.customer_id,
        company_location_id=data.company_location_id,
        currency_code=data.currency_code,
        subtotal=compute_subtotal(data.draft_quote_items),
        created_by=data.customer_id,
        updated_by=data.customer_id,
        items=_build_items(data.draft_quote_items),
    )
    db.add(quote)
    await db.commit()

    logger.info(
        "Draft quote created",
        extra={"quote_id": quote.id, "customer_id": data.customer_id},
    )
    return _map_draft_quote(await _get_quote_with_items(db, quote.id))


# =====================================================
# READ
# =====================================================

@_logged("Get quote details")
async def get_quote_details(
    db: AsyncSession,
    shopify: ShopifyClient,
    payload: QuoteDetailsRequest,
) -> QuoteDetailOut:
    """
    Quote with items and notes, enriched from the platform.

    The customer, company location and variant reads are independent and
    run concurrently; a failure in any of them fails the request.
    """
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)
    store_name = quote.store_name
    location_id = payload.company_location_id or quote.company_location_id
    variant_ids = [i.variant_id for i in quote.items]

    async def _nothing() -> dict:
        return {}

    # all reads settle before the first failure is raised
    results = await asyncio.gather(
        shopify.query(BATCH_GET_CUSTOMERS, store_name, {"ids": [quote.customer_id]}),
        shopify.query(
            BATCH_GET_COMPANY_LOCATIONS,
            store_name,
            {"companyLocationIds": [location_id]},
        ) if location_id else _nothing(),
        shopify.query(
            BATCH_GET_VARIANT_PRICES,
            store_name,
            {"variantIds": variant_ids, "companyLocationId": location_id},
        ) if location_id and variant_ids else _nothing(),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    customer_data, location_data, variant_data = results

    customer_nodes = [n for n in customer_data.get("nodes") or [] if n]
    location_nodes = [n for n in location_data.get("nodes") or [] if n]
    variants = {
        n["id"]: _map_variant(n)
        for n in variant_data.get("nodes") or []
        if n and n.get("id")
    }

    return QuoteDetailOut(
        **_base_fields(quote),
        customer=CustomerInfo.model_validate(customer_nodes[0]) if customer_nodes else None,
        company_location_details=_map_company_location(location_nodes[0] if location_nodes else None),
        quote_items=[
            QuoteItemDetailOut(
                **QuoteItemOut.model_validate(i).model_dump(),
                variant=variants.get(i.variant_id),
            )
            for i in quote.items
        ],
    )


def _apply_filters(stmt, f: QuoteFilter):
    if f.id is not None:
        stmt = stmt.where(Quote.id == f.id)
    if f.status is not None:
        stmt = stmt.where(Quote.status == f.status)
    if f.company_location_id:
        stmt = stmt.where(Quote.company_location_id == f.company_location_id)
    if f.currency_code:
        stmt = stmt.where(Quote.currency_code == f.currency_code)
    if f.po_number:
        stmt = stmt.where(Quote.po_number.ilike(f"%{f.po_number}%"))
    if f.created_by:
        stmt = stmt.where(Quote.created_by == f.created_by)
    if f.updated_by:
        stmt = stmt.where(Quote.updated_by == f.updated_by)
    if f.action_by:
        stmt = stmt.where(Quote.action_by == f.action_by)

    # date filters are inclusive lower bounds at midnight UTC
    for value, column in (
        (f.created_at, Quote.created_at),
        (f.updated_at, Quote.updated_at),
        (f.expiration_date, Quote.expiration_date),
    ):
        if value is not None:
            stmt = stmt.where(column >= datetime.combine(value, time.min, tzinfo=timezone.utc))

    return stmt


def _apply_sort(stmt, sort: list[QuoteSortItem]):
    clauses = [
        asc(SORT_COLUMNS[s.field]) if s.order == "asc" else desc(SORT_COLUMNS[s.field])
        for s in sort
    ]
    # stable pages when the requested keys tie
    clauses.append(desc(Quote.id))
    return stmt.order_by(*clauses)


async def _paginate(db: AsyncSession, stmt, page: int, page_size: int) -> tuple[list[Quote], int]:
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    result = await db.execute(stmt.offset((page - 1) * page_size).limit(page_size))
    return list(result.scalars().all()), total or 0


async def _search_customer_ids(shopify: ShopifyClient, store_name: str, search: str) -> list[str]:
    data = await shopify.query(SEARCH_CUSTOMERS, store_name, {"query": search})
    edges = (data.get("customers") or {}).get("edges") or []
    return [e["node"]["id"] for e in edges if e.get("node")]


async def _fetch_customers(
    shopify: ShopifyClient,
    store_name: str,
    customer_ids: list[str],
) -> dict[str, CustomerInfo]:
    if not customer_ids:
        return {}
    try:
        data = await shopify.query(BATCH_GET_CUSTOMERS, store_name, {"ids": customer_ids})
    except AppException as exc:
        logger.warning(
            "Customer enrichment failed; returning quotes without customer details",
            extra={"store_name": store_name, "error_message": exc.detail},
        )
        return {}

    return {
        n["id"]: CustomerInfo.model_validate(n)
        for n in data.get("nodes") or []
        if n and n.get("id")
    }


@_logged("Fetch quotes")
async def fetch_quotes(
    db: AsyncSession,
    shopify: ShopifyClient,
    payload: FetchQuotesRequest,
) -> QuoteListData:
    page = payload.pagination.page
    page_size = payload.pagination.page_size
    f = payload.filter

    logger.info(
        "Fetching quotes",
        extra={"store_name": payload.store_name, "page": page, "page_size": page_size},
    )

    customer_ids = set(f.customer_ids) if f.customer_ids else None

    if f.customer:
        found = set(await _search_customer_ids(shopify, payload.store_name, f.customer))
        if not found:
            logger.info(
                "No customers matched search; returning empty page",
                extra={"search": f.customer},
            )
            return QuoteListData(quotes=[], page=page, page_size=page_size, total_count=0)
        customer_ids = found if customer_ids is None else customer_ids & found
        if not customer_ids:
            return QuoteListData(quotes=[], page=page, page_size=page_size, total_count=0)

    stmt = select(Quote).where(
        Quote.store_name == payload.store_name,
        Quote.status != QuoteStatus.DRAFT,
    )
    if payload.company_location_id:
        stmt = stmt.where(Quote.company_location_id == payload.company_location_id)
    if customer_ids is not None:
        stmt = stmt.where(Quote.customer_id.in_(sorted(customer_ids)))

    stmt = _apply_sort(_apply_filters(stmt, f), payload.sort)
    quotes, total = await _paginate(db, stmt, page, page_size)

    customers = await _fetch_customers(
        shopify,
        payload.store_name,
        sorted({q.customer_id for q in quotes}),
    )

    return QuoteListData(
        quotes=[
            QuoteWithCustomerOut(
                **_base_fields(q),
                quote_items=_map_items(q),
                customer=customers.get(q.customer_id),
            )
            for q in quotes
        ],
        page=page,
        page_size=page_size,
        total_count=total,
    )


@_logged("Fetch draft quotes")
async def fetch_draft_quotes(
    db: AsyncSession,
    payload: FetchDraftQuotesRequest,
) -> DraftQuoteListData:
    page = payload.pagination.page
    page_size = payload.pagination.page_size

    stmt = select(Quote).where(
        Quote.store_name == payload.store_name,
        Quote.company_location_id == payload.company_location_id,
        Quote.status == QuoteStatus.DRAFT,
    )
    if payload.customer_id:
        stmt = stmt.where(Quote.customer_id == payload.customer_id)

    stmt = _apply_sort(_apply_filters(stmt, payload.filter), payload.sort)
    quotes, total = await _paginate(db, stmt, page, page_size)

    return DraftQuoteListData(
        draft_quotes=[_map_draft_quote(q) for q in quotes],
        page=page,
        page_size=page_size,
        total_count=total,
    )


@_logged("Get draft quote details")
async def get_draft_quote_details(
    db: AsyncSession,
    payload: DraftQuoteDetailsRequest,
) -> DraftQuoteOut:
    quote = await _get_quote_with_items(db, payload.draft_quote_id, payload.store_name)
    if quote.status != QuoteStatus.DRAFT:
        raise QuoteError.draft_not_found(payload.draft_quote_id)
    if quote.customer_id != payload.customer_id:
        raise QuoteError.unauthorized_access(payload.draft_quote_id)
    return _map_draft_quote(quote)


# =====================================================
# STATUS CHANGES
# =====================================================

@_logged("Update quote status")
async def update_quote_status(
    db: AsyncSession,
    quote_id: int,
    payload: QuoteStatusUpdate,
) -> QuoteOut:
    quote = await _get_quote_with_items(db, quote_id)
    quote = await _transition_quote(db, quote, payload.status, payload.action_by, payload.note)
    return _map_quote(quote)


@_logged("Submit draft quote")
async def submit_draft_quote(
    db: AsyncSession,
    payload: SubmitDraftQuoteRequest,
) -> QuoteOut:
    quote = await _get_owned_draft(db, payload.draft_quote_id, payload.customer_id, payload.store_name)
    quote = await _transition_quote(
        db, quote, QuoteStatus.SUBMITTED, payload.customer_id, payload.submit_note
    )
    return _map_quote(quote)


@_logged("Approve quote")
async def approve_quote(
    db: AsyncSession,
    payload: ApproveQuoteRequest,
) -> QuoteOut:
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)
    actor = payload.action_by or payload.customer_id
    quote = await _transition_quote(db, quote, QuoteStatus.APPROVED, actor, payload.approve_note)
    return _map_quote(quote)


@_logged("Reject quote")
async def reject_quote(
    db: AsyncSession,
    payload: RejectQuoteRequest,
) -> QuoteOut:
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)
    if quote.status != QuoteStatus.SUBMITTED:
        raise QuoteError.invalid_status_transition(quote.status, QuoteStatus.DECLINED)

    actor = payload.action_by or payload.customer_id
    quote = await _transition_quote(db, quote, QuoteStatus.DECLINED, actor, payload.reject_note)
    return _map_quote(quote)


@_logged("Cancel quote")
async def cancel_quote(
    db: AsyncSession,
    payload: CancelQuoteRequest,
) -> QuoteOut:
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)
    actor = payload.action_by or payload.customer_id
    quote = await _transition_quote(db, quote, QuoteStatus.CANCELLED, actor, payload.cancel_note)
    return _map_quote(quote)


@_logged("Expire quote")
async def expire_quote(
    db: AsyncSession,
    payload: ExpireQuoteRequest,
) -> QuoteOut:
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)
    actor = payload.action_by or payload.customer_id
    quote = await _transition_quote(db, quote, QuoteStatus.EXPIRED, actor, payload.expire_note)
    return _map_quote(quote)


# =====================================================
# ORDER CONVERSION
# =====================================================

def _order_line_items(quote: Quote) -> list[dict]:
    if not quote.items:
        raise AppException(400, "Quote items not found", ErrorCode.QUOTE_ITEMS_NOT_FOUND)

    line_items = []
    for item in quote.items:
        if not item.variant_id:
            raise AppException(
                400,
                f"Product variant ID not found for quote item {item.id}",
                ErrorCode.PRODUCT_VARIANT_ID_NOT_FOUND,
            )
        line_items.append(
            {
                "variant_id": item.variant_id,
                "quantity": item.quantity,
                "price": item.offer_price,
            }
        )
    return line_items


async def _load_order_context(
    shopify: ShopifyClient,
    quote: Quote,
    store_name: str,
) -> tuple[dict, dict, dict]:
    """Customer, shipping address and billing address for a quote's order."""
    customer_data = await shopify.query(
        GET_CUSTOMER_EMAIL, store_name, {"customerId": quote.customer_id}
    )
    customer = customer_data.get("customer") or {}
    if not customer.get("email"):
        raise AppException(404, "Customer email not found", ErrorCode.CUSTOMER_EMAIL_NOT_FOUND)

    location_data = await shopify.query(
        GET_COMPANY_LOCATION_ADDRESS,
        store_name,
        {"companyLocationId": quote.company_location_id},
    )
    location = location_data.get("companyLocation") or {}
    shipping_address = location.get("shippingAddress")
    if not shipping_address:
        raise AppException(
            404,
            "Company location shipping address not found",
            ErrorCode.SHIPPING_ADDRESS_NOT_FOUND,
        )

    billing_address = location.get("billingAddress") or shipping_address
    return customer, shipping_address, billing_address


def _purchasing_entity(customer: dict, quote: Quote) -> dict:
    profiles = customer.get("companyContactProfiles") or []
    profile = profiles[0] if profiles else {}
    company = profile.get("company") or {}

    if profile.get("id") and company.get("id"):
        return {
            "purchasingCompany": {
                "companyContactId": profile["id"],
                "companyId": company["id"],
                "companyLocationId": quote.company_location_id,
            }
        }
    return {"customerId": quote.customer_id}


async def _create_draft_order_from_quote(
    shopify: ShopifyClient,
    quote: Quote,
    store_name: str,
    buyer_config: dict,
    note: str | None,
    shipping_line: dict | None,
) -> str:
    customer, shipping_address, billing_address = await _load_order_context(shopify, quote, store_name)
    line_items = _order_line_items(quote)
    purchasing_entity = _purchasing_entity(customer, quote)

    logger.info(
        "Creating draft order from quote",
        extra={"quote_id": quote.id, "purchasing_entity": purchasing_entity},
    )

    draft_input = prepare_draft_order_input(
        items=line_items,
        currency_code=quote.currency_code,
        purchasing_entity=purchasing_entity,
        shipping_address=shipping_address,
        billing_address=billing_address,
        note=note,
        po_number=quote.po_number,
        email=customer.get("email"),
        phone=customer.get("phone"),
        payment_terms_template=buyer_config.get("paymentTermsTemplate"),
        shipping_line=shipping_line,
    )
    return await create_draft_order(shopify, store_name, draft_input)


async def _create_order_from_quote(
    shopify: ShopifyClient,
    quote: Quote,
    store_name: str,
    note: str | None,
) -> str:
    customer, shipping_address, billing_address = await _load_order_context(shopify, quote, store_name)

    order_input = prepare_direct_order_input(
        items=_order_line_items(quote),
        currency_code=quote.currency_code,
        customer_id=quote.customer_id,
        company_location_id=quote.company_location_id,
        shipping_address=shipping_address,
        billing_address=billing_address,
        note=note,
        po_number=quote.po_number,
        email=customer.get("email"),
        phone=customer.get("phone"),
    )
    return await create_direct_order(shopify, store_name, order_input)


@_logged("Convert quote to order")
async def convert_quote_to_order(
    db: AsyncSession,
    shopify: ShopifyClient,
    payload: ConvertQuoteToOrderRequest,
) -> ConvertToOrderData:
    """
    Turn an Approved quote into a platform draft order or order.

    The company location's ``checkoutToDraft`` setting (true when absent)
    picks the draft-order path. Platform mutations that already went through
    are not undone if a later step fails.
    """
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)
    quote_id = quote.id

    if quote.status != QuoteStatus.APPROVED:
        raise QuoteError.invalid_status_for_order(quote.status)

    logger.info(
        "Converting quote to order",
        extra={"quote_id": quote_id, "store_name": quote.store_name},
    )

    try:
        if not quote.customer_id or not quote.company_location_id:
            raise AppException(
                400,
                f"Invalid quote data for ID {quote_id}",
                ErrorCode.INVALID_QUOTE_DATA,
            )

        config_data = await shopify.query(
            GET_COMPANY_LOCATION_BUYER_CONFIG,
            quote.store_name,
            {"companyLocationId": quote.company_location_id},
        )
        buyer_config = (
            (config_data.get("companyLocation") or {}).get("buyerExperienceConfiguration") or {}
        )
        checkout_to_draft = buyer_config.get("checkoutToDraft")
        if checkout_to_draft is None:
            checkout_to_draft = True

        result = ConvertToOrderData(quote_id=quote_id, checkout_to_draft=checkout_to_draft)

        if checkout_to_draft:
            result.draft_order_id = await _create_draft_order_from_quote(
                shopify, quote, quote.store_name, buyer_config, payload.note, payload.shipping_line
            )
        else:
            result.order_id = await _create_order_from_quote(
                shopify, quote, quote.store_name, payload.note
            )

        actor = payload.customer_id or quote.customer_id
        validate_status_transition(quote.status, QuoteStatus.ORDERED)
        quote.status = QuoteStatus.ORDERED
        quote.action_by = actor
        quote.updated_by = actor

        await emit_quote_note(
            db,
            quote_id=quote_id,
            note_type=QuoteNoteType.ORDERED,
            created_by=actor,
            content=payload.note,
        )
        await db.commit()
    except Exception as exc:
        await db.rollback()
        reason = exc.detail if isinstance(exc, AppException) else str(exc)
        raise QuoteError.order_conversion_failed(quote_id, reason) from exc

    logger.info(
        "Quote converted to order",
        extra={
            "quote_id": quote_id,
            "checkout_to_draft": checkout_to_draft,
            "draft_order_id": result.draft_order_id,
            "order_id": result.order_id,
        },
    )
    return result


# =====================================================
# ITEM UPDATES
# =====================================================

def _apply_note_update(quote: Quote, note: QuoteNoteUpdate, actor: str | None) -> None:
    content = (note.content or "").strip()

    if note.id is None:
        if content:
            quote.notes.append(
                build_quote_note(
                    quote_id=quote.id,
                    note_type=QuoteNoteType.SUBMITTED,
                    created_by=actor,
                    content=content,
                )
            )
        return

    existing = next((n for n in quote.notes if n.id == note.id), None)
    if existing is None:
        raise AppException(
            404,
            f"Note with ID {note.id} not found on quote {quote.id}",
            ErrorCode.NOT_FOUND,
        )

    if content:
        existing.note_content = content
    else:
        quote.notes.remove(existing)


def _replace_items(quote: Quote, items: list[QuoteItemIn], actor: str | None) -> None:
    quote.items = _build_items(items)
    quote.subtotal = compute_subtotal(items)
    if actor:
        quote.updated_by = actor


@_logged("Update quote items")
async def update_quote_items(
    db: AsyncSession,
    payload: QuoteItemsUpdate,
) -> QuoteOut:
    quote = await _get_quote_with_items(db, payload.quote_id, payload.store_name)

    if payload.expiration_date is not None:
        quote.expiration_date = _validate_expiration(payload.expiration_date)

    _replace_items(quote, payload.quote_items, payload.customer_id)

    if payload.po_number is not None:
        quote.po_number = payload.po_number

    if payload.note is not None:
        _apply_note_update(quote, payload.note, payload.customer_id)

    await db.commit()

    logger.info(
        "Quote items updated",
        extra={"quote_id": quote.id, "item_count": len(payload.quote_items)},
    )
    return _map_quote(await _get_quote_with_items(db, quote.id))


@_logged("Update draft quote items")
async def update_draft_quote_items(
    db: AsyncSession,
    payload: DraftQuoteItemsUpdate,
) -> DraftQuoteOut:
    quote = await _get_owned_draft(db, payload.draft_quote_id, payload.customer_id, payload.store_name)

    _replace_items(quote, payload.draft_quote_items, payload.customer_id)
    await db.commit()

    logger.info(
        "Draft quote items updated",
        extra={"quote_id": quote.id, "item_count": len(payload.draft_quote_items)},
    )
    return _map_draft_quote(await _get_quote_with_items(db, quote.id))


# =====================================================
# BULK DELETE
# =====================================================

async def _load_quotes(db: AsyncSession, quote_ids: list[int], store_name: str) -> list[Quote]:
    result = await db.execute(
        select(Quote).where(
            Quote.id.in_(quote_ids),
            Quote.store_name == store_name,
        )
    )
    return list(result.scalars().all())


async def _delete_quotes(db: AsyncSession, quotes: list[Quote]) -> int:
    for quote in quotes:
        await db.delete(quote)
    await db.commit()
    return len(quotes)


@_logged("Bulk delete quotes")
async def bulk_delete_quotes(
    db: AsyncSession,
    payload: BulkDeleteQuotesRequest,
) -> int:
    requested = list(dict.fromkeys(payload.quote_ids))
    quotes = await _load_quotes(db, requested, payload.store_name)

    found = {q.id for q in quotes}
    missing = [i for i in requested if i not in found]
    if missing:
        raise QuoteError.not_found(missing)

    foreign = [q.id for q in quotes if q.customer_id != payload.customer_id]
    if foreign:
        raise QuoteError.unauthorized_access(sorted(foreign))

    deleted = await _delete_quotes(db, quotes)
    logger.info("Quotes deleted", extra={"quote_ids": requested, "deleted": deleted})
    return deleted


@_logged("Bulk delete draft quotes")
async def bulk_delete_draft_quotes(
    db: AsyncSession,
    payload: BulkDeleteDraftQuotesRequest,
) -> int:
    """All-or-nothing: one bad id fails the whole batch."""
    requested = list(dict.fromkeys(payload.draft_quote_ids))
    quotes = await _load_quotes(db, requested, payload.store_name)

    found = {q.id for q in quotes}
    missing = [i for i in requested if i not in found]
    if missing:
        raise QuoteError.not_found(missing)

    not_drafts = [q.id for q in quotes if q.status != QuoteStatus.DRAFT]
    if not_drafts:
        raise QuoteError.draft_not_found(sorted(not_drafts))

    foreign = [q.id for q in quotes if q.customer_id != payload.customer_id]
    if foreign:
        raise QuoteError.unauthorized_access(sorted(foreign))

    deleted = await _delete_quotes(db, quotes)
    logger.info("Draft quotes deleted", extra={"quote_ids": requested, "deleted": deleted})
    return deleted
