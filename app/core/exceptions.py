from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    @property
    def message(self) -> str:
        return self.detail

    def __str__(self) -> str:
        return self.detail


def _join_ids(ids) -> str:
    if isinstance(ids, (list, tuple, set)):
        return ", ".join(str(i) for i in ids)
    return str(ids)


class QuoteError(AppException):
    """Quote-specific failures, built through the factories below."""

    @classmethod
    def not_found(cls, quote_id) -> "QuoteError":
        return cls(
            404,
            f"Quote with ID {_join_ids(quote_id)} not found",
            ErrorCode.QUOTE_NOT_FOUND,
        )

    @classmethod
    def draft_not_found(cls, quote_id) -> "QuoteError":
        return cls(
            404,
            f"Draft quote with ID {_join_ids(quote_id)} not found",
            ErrorCode.QUOTE_NOT_FOUND,
        )

    @classmethod
    def unauthorized_access(cls, quote_id) -> "QuoteError":
        return cls(
            403,
            f"Unauthorized to access quote with ID {_join_ids(quote_id)}",
            ErrorCode.QUOTE_UNAUTHORIZED_ACCESS,
        )

    @classmethod
    def invalid_status_transition(cls, current_status, new_status) -> "QuoteError":
        current = getattr(current_status, "value", current_status)
        new = getattr(new_status, "value", new_status)
        return cls(
            400,
            f"Invalid status transition from {current} to {new}",
            ErrorCode.QUOTE_INVALID_STATUS_TRANSITION,
            details={"current_status": current, "requested_status": new},
        )

    @classmethod
    def invalid_status_for_order(cls, status) -> "QuoteError":
        status = getattr(status, "value", status)
        return cls(
            400,
            f"Cannot convert quote with status {status} to order. "
            "Only Approved quotes can be converted.",
            ErrorCode.QUOTE_INVALID_STATUS_FOR_ORDER,
        )

    @classmethod
    def order_conversion_failed(cls, quote_id: int, reason: str | None = None) -> "QuoteError":
        suffix = f": {reason}" if reason else ""
        return cls(
            500,
            f"Failed to convert quote {quote_id} to order{suffix}",
            ErrorCode.QUOTE_ORDER_CONVERSION_FAILED,
        )


class ShopifyError(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(502, message, ErrorCode.PLATFORM_REQUEST_FAILED, details)
