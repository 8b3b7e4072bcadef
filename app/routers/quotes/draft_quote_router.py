from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.response import success_response, APIResponse

from app.schemas.quotes.quote_schemas import (
    DraftQuoteCreate,
    DraftQuoteOut,
    DraftQuoteDetailsRequest,
    DraftQuoteListData,
    FetchDraftQuotesRequest,
    DraftQuoteItemsUpdate,
    SubmitDraftQuoteRequest,
    QuoteOut,
    BulkDeleteDraftQuotesRequest,
    BulkDeleteData,
)

from app.services.quotes.quote_service import (
    create_draft_quote,
    fetch_draft_quotes,
    get_draft_quote_details,
    update_draft_quote_items,
    submit_draft_quote,
    bulk_delete_draft_quotes,
)

router = APIRouter(
    prefix="/api/v1/draft-quotes",
    tags=["Draft Quotes"],
)


@router.post(
    "/create",
    response_model=APIResponse[DraftQuoteOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_draft_quote_api(
    payload: DraftQuoteCreate,
    db: AsyncSession = Depends(get_db),
):
    quote = await create_draft_quote(db, payload)
    return success_response("Draft quote created successfully", quote, code=201)


@router.post(
    "/fetch-all",
    response_model=APIResponse[DraftQuoteListData],
)
async def fetch_draft_quotes_api(
    payload: FetchDraftQuotesRequest,
    db: AsyncSession = Depends(get_db),
):
    data = await fetch_draft_quotes(db, payload)
    return success_response("Draft quotes retrieved successfully", data)


@router.post(
    "/get-by-id",
    response_model=APIResponse[DraftQuoteOut],
)
async def get_draft_quote_api(
    payload: DraftQuoteDetailsRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await get_draft_quote_details(db, payload)
    return success_response("Draft quote retrieved successfully", quote)


@router.post(
    "/items/update",
    response_model=APIResponse[DraftQuoteOut],
)
async def update_draft_quote_items_api(
    payload: DraftQuoteItemsUpdate,
    db: AsyncSession = Depends(get_db),
):
    quote = await update_draft_quote_items(db, payload)
    return success_response("Draft quote items updated successfully", quote)


@router.post(
    "/submit",
    response_model=APIResponse[QuoteOut],
)
async def submit_draft_quote_api(
    payload: SubmitDraftQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await submit_draft_quote(db, payload)
    return success_response("Draft quote submitted successfully", quote)


@router.post(
    "/bulk-delete",
    response_model=APIResponse[BulkDeleteData],
)
async def bulk_delete_draft_quotes_api(
    payload: BulkDeleteDraftQuotesRequest,
    db: AsyncSession = Depends(get_db),
):
    deleted = await bulk_delete_draft_quotes(db, payload)
    return success_response(
        f"{deleted} draft quote(s) deleted successfully",
        BulkDeleteData(deleted_count=deleted),
    )
