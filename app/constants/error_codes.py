# app/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- QUOTES ----------------
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    QUOTE_UNAUTHORIZED_ACCESS = "QUOTE_UNAUTHORIZED_ACCESS"
    QUOTE_INVALID_STATUS_TRANSITION = "QUOTE_INVALID_STATUS_TRANSITION"
    QUOTE_INVALID_STATUS_FOR_ORDER = "QUOTE_INVALID_STATUS_FOR_ORDER"
    QUOTE_ORDER_CONVERSION_FAILED = "QUOTE_ORDER_CONVERSION_FAILED"
    QUOTE_ITEMS_NOT_FOUND = "QUOTE_ITEMS_NOT_FOUND"
    INVALID_QUOTE_DATA = "INVALID_QUOTE_DATA"
    INVALID_EXPIRATION_DATE = "INVALID_EXPIRATION_DATE"

    # ---------------- ORDERS ----------------
    CUSTOMER_EMAIL_NOT_FOUND = "CUSTOMER_EMAIL_NOT_FOUND"
    SHIPPING_ADDRESS_NOT_FOUND = "SHIPPING_ADDRESS_NOT_FOUND"
    PRODUCT_VARIANT_ID_NOT_FOUND = "PRODUCT_VARIANT_ID_NOT_FOUND"
    DRAFT_ORDER_CREATION_FAILED = "DRAFT_ORDER_CREATION_FAILED"
    ORDER_CREATION_FAILED = "ORDER_CREATION_FAILED"

    # ---------------- PLATFORM ----------------
    PLATFORM_REQUEST_FAILED = "PLATFORM_REQUEST_FAILED"
