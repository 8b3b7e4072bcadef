from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.integrations.shopify.client import ShopifyClient, get_shopify_client
from app.utils.response import success_response, APIResponse

from app.schemas.quotes.quote_schemas import (
    QuoteCreate,
    QuoteOut,
    QuoteDetailOut,
    QuoteDetailsRequest,
    QuoteListData,
    FetchQuotesRequest,
    QuoteItemsUpdate,
    QuoteStatusUpdate,
    ApproveQuoteRequest,
    RejectQuoteRequest,
    CancelQuoteRequest,
    ExpireQuoteRequest,
    ConvertQuoteToOrderRequest,
    ConvertToOrderData,
    BulkDeleteQuotesRequest,
    BulkDeleteData,
    ScanExpiredData,
)

from app.services.quotes.quote_service import (
    create_quote,
    fetch_quotes,
    get_quote_details,
    update_quote_items,
    update_quote_status,
    approve_quote,
    reject_quote,
    cancel_quote,
    expire_quote,
    convert_quote_to_order,
    bulk_delete_quotes,
)
from app.services.quotes.quote_expiry_service import scan_and_expire_quotes

router = APIRouter(
    prefix="/api/v1/quotes",
    tags=["Quotes"],
)


@router.post(
    "/create",
    response_model=APIResponse[QuoteOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_quote_api(
    payload: QuoteCreate,
    db: AsyncSession = Depends(get_db),
):
    quote = await create_quote(db, payload)
    return success_response("Quote created successfully", quote, code=201)


@router.post(
    "/fetch-all",
    response_model=APIResponse[QuoteListData],
)
async def fetch_quotes_api(
    payload: FetchQuotesRequest,
    db: AsyncSession = Depends(get_db),
    shopify: ShopifyClient = Depends(get_shopify_client),
):
    data = await fetch_quotes(db, shopify, payload)
    return success_response("Quotes retrieved successfully", data)


@router.post(
    "/get-by-id",
    response_model=APIResponse[QuoteDetailOut],
)
async def get_quote_api(
    payload: QuoteDetailsRequest,
    db: AsyncSession = Depends(get_db),
    shopify: ShopifyClient = Depends(get_shopify_client),
):
    quote = await get_quote_details(db, shopify, payload)
    return success_response("Quote retrieved successfully", quote)


@router.post(
    "/items/update",
    response_model=APIResponse[QuoteOut],
)
async def update_quote_items_api(
    payload: QuoteItemsUpdate,
    db: AsyncSession = Depends(get_db),
):
    quote = await update_quote_items(db, payload)
    return success_response("Quote items updated successfully", quote)


@router.post(
    "/approve",
    response_model=APIResponse[QuoteOut],
)
async def approve_quote_api(
    payload: ApproveQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await approve_quote(db, payload)
    return success_response("Quote approved successfully", quote)


@router.post(
    "/reject",
    response_model=APIResponse[QuoteOut],
)
async def reject_quote_api(
    payload: RejectQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await reject_quote(db, payload)
    return success_response("Quote rejected successfully", quote)


@router.post(
    "/cancel",
    response_model=APIResponse[QuoteOut],
)
async def cancel_quote_api(
    payload: CancelQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await cancel_quote(db, payload)
    return success_response("Quote cancelled successfully", quote)


@router.post(
    "/expire",
    response_model=APIResponse[QuoteOut],
)
async def expire_quote_api(
    payload: ExpireQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await expire_quote(db, payload)
    return success_response("Quote expired successfully", quote)


@router.post(
    "/convert-to-order",
    response_model=APIResponse[ConvertToOrderData],
)
async def convert_quote_to_order_api(
    payload: ConvertQuoteToOrderRequest,
    db: AsyncSession = Depends(get_db),
    shopify: ShopifyClient = Depends(get_shopify_client),
):
    data = await convert_quote_to_order(db, shopify, payload)
    return success_response("Quote converted to order successfully", data)


@router.post(
    "/bulk-delete",
    response_model=APIResponse[BulkDeleteData],
)
async def bulk_delete_quotes_api(
    payload: BulkDeleteQuotesRequest,
    db: AsyncSession = Depends(get_db),
):
    deleted = await bulk_delete_quotes(db, payload)
    return success_response(
        f"{deleted} quote(s) deleted successfully",
        BulkDeleteData(deleted_count=deleted),
    )


@router.post(
    "/scan-expired",
    response_model=APIResponse[ScanExpiredData],
)
async def scan_expired_quotes_api(
    db: AsyncSession = Depends(get_db),
):
    expired_ids = await scan_and_expire_quotes(db)
    return success_response(
        "Expired quotes processed successfully",
        ScanExpiredData(expired_quote_ids=expired_ids),
    )


@router.patch(
    "/{quote_id}/status",
    response_model=APIResponse[QuoteOut],
)
async def update_quote_status_api(
    quote_id: int,
    payload: QuoteStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    quote = await update_quote_status(db, quote_id, payload)
    return success_response("Quote status updated successfully", quote)
