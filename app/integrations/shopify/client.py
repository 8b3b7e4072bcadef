"""
Thin async client for the Shopify Admin GraphQL API.

Every call is a single POST; there is no retry or backoff. Transport
failures, non-2xx responses and top-level GraphQL ``errors`` all raise
``ShopifyError`` so callers only deal with one exception type. Mutation
``userErrors`` are part of ``data`` and left to the caller.

Usage:
    client = ShopifyClient(access_token="shpat_xxx")
    data = await client.query(GET_CUSTOMER_EMAIL, "acme.myshopify.com", {"customerId": gid})
    await client.close()
"""

from typing import Any, Optional

import httpx

from app.core.config import SHOPIFY_ACCESS_TOKEN, SHOPIFY_API_VERSION, SHOPIFY_TIMEOUT_SECONDS
from app.core.exceptions import ShopifyError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class ShopifyClient:
    def __init__(
        self,
        access_token: str = SHOPIFY_ACCESS_TOKEN,
        api_version: str = SHOPIFY_API_VERSION,
        timeout: float = SHOPIFY_TIMEOUT_SECONDS,
    ) -> None:
        self._access_token = access_token
        self._api_version = api_version
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self._access_token,
                },
            )
        return self._client

    def endpoint(self, store_name: str) -> str:
        return f"https://{store_name}/admin/api/{self._api_version}/graphql.json"

    async def query(
        self,
        document: str,
        store_name: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Run a GraphQL operation and return its ``data`` object."""
        payload = {"query": document, "variables": variables or {}}

        try:
            response = await self._get_client().post(self.endpoint(store_name), json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Shopify request failed",
                extra={"store_name": store_name, "status_code": exc.response.status_code},
            )
            raise ShopifyError(
                f"Shopify request failed with status {exc.response.status_code}",
                details={"store_name": store_name},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Shopify request error",
                extra={"store_name": store_name, "error_message": str(exc)},
            )
            raise ShopifyError(
                f"Shopify request error: {exc}",
                details={"store_name": store_name},
            ) from exc

        body = response.json()
        errors = body.get("errors")
        if errors:
            messages = [
                e.get("message", "unknown error") if isinstance(e, dict) else str(e)
                for e in (errors if isinstance(errors, list) else [errors])
            ]
            logger.error(
                "Shopify GraphQL errors",
                extra={"store_name": store_name, "errors": messages},
            )
            raise ShopifyError(
                f"Shopify GraphQL error: {', '.join(messages)}",
                details={"store_name": store_name, "errors": messages},
            )

        return body.get("data") or {}

    # mutations go through the same endpoint
    mutation = query

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


_shopify_client: Optional[ShopifyClient] = None


def get_shopify_client() -> ShopifyClient:
    """FastAPI dependency returning the process-wide client."""
    global _shopify_client
    if _shopify_client is None:
        _shopify_client = ShopifyClient()
    return _shopify_client


async def close_shopify_client() -> None:
    global _shopify_client
    if _shopify_client is not None:
        await _shopify_client.close()
        _shopify_client = None
