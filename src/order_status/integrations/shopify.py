"""Shopify Admin GraphQL order lookup adapter.

Provides a read-only helper to find the most recent order matching a
search query. The client performs exactly one request per lookup; any
retry or timeout policy lives in the underlying `httpx` transport.
"""
from typing import Any, Dict, Optional
import logging

import httpx

from ..errors import UpstreamError
from ..schemas import OrderRecord

logger = logging.getLogger(__name__)


ORDER_QUERY = """
query GetOrder($q: String!) {
  orders(first: 1, query: $q, sortKey: CREATED_AT, reverse: true) {
    edges {
      node {
        id
        name
        createdAt
        displayFulfillmentStatus
        fulfillments(first: 10) {
          trackingInfo {
            number
            url
          }
        }
      }
    }
  }
}
"""


def _first_error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if isinstance(errors, str):
        return errors or None
    if isinstance(errors, dict):
        return errors.get("message")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict):
            return first.get("message")
        return str(first)
    return None


class ShopifyClient:
    """Minimal async client for the Shopify Admin GraphQL API."""

    def __init__(
        self,
        shop: str,
        access_token: str,
        api_version: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self.shop = shop
        self.api_version = api_version
        self._headers = {"X-Shopify-Access-Token": access_token, "Content-Type": "application/json"}
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST a GraphQL document and return its `data` object.

        Raises UpstreamError on a non-2xx response or when the body carries
        an `errors` entry.
        """
        try:
            resp = await self._client.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            logger.error("Shopify request failed: %s", exc)
            raise UpstreamError(message=str(exc) or f"upstream error ({type(exc).__name__})") from exc

        try:
            body = resp.json()
        except ValueError:
            body = None

        # Any `errors` entry fails the call, even one without a message
        has_errors = isinstance(body, dict) and body.get("errors") is not None
        if not resp.is_success or has_errors or not isinstance(body, dict):
            msg = _first_error_message(body) or f"upstream error (status {resp.status_code})"
            logger.error("Shopify GraphQL error: %s", msg)
            raise UpstreamError(message=msg)

        return body.get("data") or {}

    async def find_order(self, search: str) -> Optional[OrderRecord]:
        """Return the newest order matching `search`, or None if nothing matched."""
        data = await self.graphql(ORDER_QUERY, {"q": search})
        edges = (data.get("orders") or {}).get("edges") or []
        node = edges[0].get("node") if edges else None
        if not node:
            return None
        return OrderRecord.model_validate(node)
