from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.integrations.shopify.client import ShopifyClient
from app.integrations.shopify.queries import DRAFT_ORDER_CREATE
from app.services.orders.order_service import format_user_errors
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def create_draft_order(
    shopify: ShopifyClient,
    store_name: str,
    draft_input: dict,
) -> str:
    """Create a draft order awaiting completion; returns the draft order GID."""
    logger.info(
        "Creating draft order",
        extra={"store_name": store_name, "line_items": len(draft_input.get("lineItems", []))},
    )

    data = await shopify.mutation(DRAFT_ORDER_CREATE, store_name, {"input": draft_input})
    payload = data.get("draftOrderCreate") or {}

    user_errors = payload.get("userErrors") or []
    if user_errors:
        message = format_user_errors(user_errors)
        logger.error(
            "draftOrderCreate returned user errors",
            extra={"store_name": store_name, "errors": message},
        )
        raise AppException(
            400,
            f"Failed to create draft order: {message}",
            ErrorCode.DRAFT_ORDER_CREATION_FAILED,
        )

    draft_order = payload.get("draftOrder")
    if not draft_order or not draft_order.get("id"):
        raise AppException(
            502,
            "Failed to get created draft order details",
            ErrorCode.DRAFT_ORDER_CREATION_FAILED,
        )

    logger.info(
        "Draft order created",
        extra={"store_name": store_name, "draft_order_id": draft_order["id"]},
    )
    return draft_order["id"]
