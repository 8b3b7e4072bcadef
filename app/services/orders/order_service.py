from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.integrations.shopify.client import ShopifyClient
from app.integrations.shopify.queries import ORDER_CREATE
from app.utils.decimal_utils import money_amount
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ORDER_NOTE = "Order created via API"


def format_address(address: Optional[dict]) -> Optional[dict]:
    """Company-location address → MailingAddressInput."""
    if not address:
        return None
    return {
        "address1": address.get("address1"),
        "address2": address.get("address2"),
        "city": address.get("city"),
        "company": address.get("companyName"),
        "countryCode": address.get("countryCode"),
        "firstName": address.get("firstName"),
        "lastName": address.get("lastName"),
        "phone": address.get("phone"),
        "provinceCode": address.get("zoneCode"),
        "zip": address.get("zip"),
    }


def process_payment_terms(
    template: Optional[dict],
    now: Optional[datetime] = None,
) -> Optional[dict]:
    """
    Translate a company location's payment terms template into
    PaymentTermsInput.

    NET terms are due ``dueInDays`` after issue, RECEIPT terms are due on
    issue, FULFILLMENT and FIXED terms carry no schedule, UNKNOWN terms and
    templates without an id are dropped.
    """
    if not template or not template.get("id"):
        return None

    terms_type = template.get("paymentTermsType")
    if terms_type == "UNKNOWN":
        return None

    now = now or datetime.now(timezone.utc)
    issued_at = now.isoformat()
    due_at: Optional[str] = None

    if terms_type == "NET" and template.get("dueInDays"):
        due_at = (now + timedelta(days=int(template["dueInDays"]))).isoformat()
    elif terms_type == "RECEIPT":
        due_at = issued_at

    terms: dict[str, Any] = {"paymentTermsTemplateId": template["id"]}
    if due_at:
        terms["paymentSchedules"] = [{"issuedAt": issued_at, "dueAt": due_at}]
    return terms


def prepare_draft_order_input(
    *,
    items: Iterable[dict],
    currency_code: str,
    purchasing_entity: dict,
    shipping_address: Optional[dict],
    billing_address: Optional[dict],
    note: Optional[str] = None,
    po_number: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    payment_terms_template: Optional[dict] = None,
    shipping_line: Optional[dict] = None,
) -> dict:
    draft_input: dict[str, Any] = {
        "note": note or DEFAULT_ORDER_NOTE,
        "poNumber": po_number,
        "email": email,
        "phone": phone,
        "purchasingEntity": purchasing_entity,
        "shippingAddress": format_address(shipping_address),
        "billingAddress": format_address(billing_address),
        "lineItems": [
            {
                "variantId": item["variant_id"],
                "quantity": item["quantity"],
                "priceOverride": {
                    "amount": money_amount(item["price"]),
                    "currencyCode": currency_code,
                },
            }
            for item in items
        ],
    }

    payment_terms = process_payment_terms(payment_terms_template)
    if payment_terms:
        draft_input["paymentTerms"] = payment_terms
    if shipping_line:
        draft_input["shippingLine"] = shipping_line

    return draft_input


def prepare_direct_order_input(
    *,
    items: Iterable[dict],
    currency_code: str,
    customer_id: str,
    company_location_id: str,
    shipping_address: Optional[dict],
    billing_address: Optional[dict],
    note: Optional[str] = None,
    po_number: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> dict:
    return {
        "note": note or DEFAULT_ORDER_NOTE,
        "email": email,
        "phone": phone,
        "companyLocationId": company_location_id,
        "poNumber": po_number,
        "currency": currency_code,
        "customerId": customer_id,
        "shippingAddress": format_address(shipping_address),
        "billingAddress": format_address(billing_address),
        "lineItems": [
            {
                "variantId": item["variant_id"],
                "quantity": item["quantity"],
                "priceSet": {
                    "shopMoney": {
                        "amount": money_amount(item["price"]),
                        "currencyCode": currency_code,
                    }
                },
            }
            for item in items
        ],
    }


def format_user_errors(user_errors: list[dict]) -> str:
    parts = []
    for error in user_errors:
        field = error.get("field")
        if isinstance(field, list):
            field = ".".join(field)
        message = error.get("message")
        parts.append(f"{field}: {message}" if field else str(message))
    return ", ".join(parts)


async def create_direct_order(
    shopify: ShopifyClient,
    store_name: str,
    order_input: dict,
) -> str:
    """Create a completed order; returns the new order GID."""
    data = await shopify.mutation(ORDER_CREATE, store_name, {"order": order_input})
    payload = data.get("orderCreate") or {}

    user_errors = payload.get("userErrors") or []
    if user_errors:
        message = format_user_errors(user_errors)
        logger.error(
            "orderCreate returned user errors",
            extra={"store_name": store_name, "errors": message},
        )
        raise AppException(
            400,
            f"Failed to create order: {message}",
            ErrorCode.ORDER_CREATION_FAILED,
        )

    order = payload.get("order")
    if not order or not order.get("id"):
        raise AppException(
            502,
            "Failed to get created order details",
            ErrorCode.ORDER_CREATION_FAILED,
        )

    logger.info("Order created", extra={"store_name": store_name, "order_id": order["id"]})
    return order["id"]
