from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from app.models.enums.quote_note_type import QuoteNoteType
from app.models.enums.quote_status import QuoteStatus
from app.schemas.base import CamelModel

# =====================================================
# ITEM PAYLOADS
# =====================================================

class QuoteItemIn(CamelModel):
    product_id: str
    variant_id: str
    quantity: int = Field(..., ge=1)
    original_price: Decimal = Field(..., ge=0)
    offer_price: Decimal = Field(..., ge=0)
    description: Optional[str] = None


# =====================================================
# CREATE
# =====================================================

class QuoteData(CamelModel):
    customer_id: str
    company_location_id: Optional[str] = None
    currency_code: str = "USD"
    request_note: Optional[str] = None
    po_number: Optional[str] = None
    quote_items: List[QuoteItemIn] = Field(..., min_length=1)
    expiration_date: Optional[datetime] = None


class QuoteCreate(CamelModel):
    store_name: str
    quote: QuoteData


class DraftQuoteData(CamelModel):
    customer_id: str
    company_location_id: Optional[str] = None
    currency_code: str = "USD"
    draft_quote_items: List[QuoteItemIn] = Field(..., min_length=1)


class DraftQuoteCreate(CamelModel):
    store_name: str
    draft_quote: DraftQuoteData


# =====================================================
# SCOPED REQUESTS (store / location / customer)
# =====================================================

class QuoteScope(CamelModel):
    store_name: str
    company_location_id: Optional[str] = None
    customer_id: Optional[str] = None


class QuoteDetailsRequest(QuoteScope):
    quote_id: int


class DraftQuoteDetailsRequest(QuoteScope):
    customer_id: str
    draft_quote_id: int


class QuoteStatusUpdate(CamelModel):
    status: QuoteStatus
    action_by: str
    note: Optional[str] = None


class ApproveQuoteRequest(QuoteScope):
    quote_id: int
    action_by: Optional[str] = None
    approve_note: Optional[str] = None


class RejectQuoteRequest(QuoteScope):
    quote_id: int
    action_by: Optional[str] = None
    reject_note: Optional[str] = None


class CancelQuoteRequest(QuoteScope):
    quote_id: int
    action_by: Optional[str] = None
    cancel_note: Optional[str] = None


class ExpireQuoteRequest(QuoteScope):
    quote_id: int
    action_by: Optional[str] = None
    expire_note: Optional[str] = None


class SubmitDraftQuoteRequest(QuoteScope):
    customer_id: str
    draft_quote_id: int
    submit_note: Optional[str] = None


class ConvertQuoteToOrderRequest(QuoteScope):
    quote_id: int
    note: Optional[str] = None
    shipping_line: Optional[dict] = None


class BulkDeleteQuotesRequest(QuoteScope):
    customer_id: str
    quote_ids: List[int] = Field(..., min_length=1)


class BulkDeleteDraftQuotesRequest(QuoteScope):
    customer_id: str
    draft_quote_ids: List[int] = Field(..., min_length=1)


class QuoteNoteUpdate(CamelModel):
    id: Optional[int] = None
    content: Optional[str] = None


class QuoteItemsUpdate(QuoteScope):
    quote_id: int
    quote_items: List[QuoteItemIn] = Field(..., min_length=1)
    expiration_date: Optional[datetime] = None
    po_number: Optional[str] = None
    note: Optional[QuoteNoteUpdate] = None


class DraftQuoteItemsUpdate(QuoteScope):
    customer_id: str
    draft_quote_id: int
    draft_quote_items: List[QuoteItemIn] = Field(..., min_length=1)


# =====================================================
# LISTING
# =====================================================

SortField = Literal[
    "id",
    "customerId",
    "companyLocationId",
    "subtotal",
    "currencyCode",
    "createdAt",
    "updatedAt",
    "createdBy",
    "updatedBy",
    "expirationDate",
]


class QuotePagination(CamelModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=100)


class QuoteSortItem(CamelModel):
    field: SortField
    order: Literal["asc", "desc"] = "desc"


class QuoteFilter(CamelModel):
    id: Optional[int] = None
    # free text, resolved to customer ids through a platform customer search
    customer: Optional[str] = None
    customer_ids: Optional[List[str]] = None
    company_location_id: Optional[str] = None
    currency_code: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    action_by: Optional[str] = None
    po_number: Optional[str] = None
    status: Optional[QuoteStatus] = None

    # lower bounds (>=)
    created_at: Optional[date] = None
    updated_at: Optional[date] = None
    expiration_date: Optional[date] = None


def _default_sort() -> List[QuoteSortItem]:
    return [QuoteSortItem(field="createdAt", order="desc")]


class FetchQuotesRequest(CamelModel):
    store_name: str
    company_location_id: Optional[str] = None
    pagination: QuotePagination = Field(default_factory=QuotePagination)
    filter: QuoteFilter = Field(default_factory=QuoteFilter)
    sort: List[QuoteSortItem] = Field(default_factory=_default_sort)


class FetchDraftQuotesRequest(CamelModel):
    store_name: str
    company_location_id: str
    customer_id: Optional[str] = None
    pagination: QuotePagination = Field(default_factory=QuotePagination)
    filter: QuoteFilter = Field(default_factory=QuoteFilter)
    sort: List[QuoteSortItem] = Field(default_factory=_default_sort)


# =====================================================
# RESPONSES
# =====================================================

class QuoteItemOut(CamelModel):
    id: int
    product_id: str
    variant_id: str
    quantity: int
    original_price: Decimal
    offer_price: Decimal
    description: Optional[str]


class QuoteNoteOut(CamelModel):
    id: int
    note_type: QuoteNoteType
    note_content: str
    created_by: Optional[str]
    created_at: datetime


class QuoteBaseOut(CamelModel):
    id: int
    store_name: str
    status: QuoteStatus
    customer_id: str
    company_location_id: Optional[str]
    currency_code: str
    po_number: Optional[str]
    subtotal: Decimal
    expiration_date: Optional[datetime]
    item_count: int

    created_by: str
    updated_by: Optional[str]
    action_by: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    notes: List[QuoteNoteOut] = []


class QuoteOut(QuoteBaseOut):
    quote_items: List[QuoteItemOut]


class DraftQuoteOut(QuoteBaseOut):
    draft_quote_items: List[QuoteItemOut]


class CustomerInfo(CamelModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    state: Optional[str] = None


class CompanyRef(CamelModel):
    id: str
    name: Optional[str] = None


class CompanyLocationDetails(CamelModel):
    id: str
    name: Optional[str] = None
    company: Optional[CompanyRef] = None
    shipping_address: Optional[dict] = None
    billing_address: Optional[dict] = None


class VariantProductOut(CamelModel):
    id: Optional[str] = None
    title: Optional[str] = None
    handle: Optional[str] = None
    images: Optional[list] = None


class VariantOut(CamelModel):
    id: str
    title: Optional[str] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None
    metafield: Optional[dict] = None
    price: Optional[dict] = None
    quantity_rule: Optional[dict] = None
    image: Optional[dict] = None
    product: Optional[VariantProductOut] = None


class QuoteItemDetailOut(QuoteItemOut):
    variant: Optional[VariantOut] = None


class QuoteDetailOut(QuoteBaseOut):
    customer: Optional[CustomerInfo] = None
    company_location_details: Optional[CompanyLocationDetails] = None
    quote_items: List[QuoteItemDetailOut]


class QuoteWithCustomerOut(QuoteOut):
    customer: Optional[CustomerInfo] = None


class QuoteListData(CamelModel):
    quotes: List[QuoteWithCustomerOut]
    page: int
    page_size: int
    total_count: int


class DraftQuoteListData(CamelModel):
    draft_quotes: List[DraftQuoteOut]
    page: int
    page_size: int
    total_count: int


class BulkDeleteData(CamelModel):
    deleted_count: int


class ScanExpiredData(CamelModel):
    expired_quote_ids: List[int]


class ConvertToOrderData(CamelModel):
    quote_id: int
    checkout_to_draft: bool
    draft_order_id: Optional[str] = None
    order_id: Optional[str] = None
