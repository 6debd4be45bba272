# tests/conftest.py

import datetime
import json
import logging

import httpx
import pytest

from order_status.config import Settings
from order_status.integrations.shopify import ShopifyClient

fixture_logger = logging.getLogger(__name__ + ".fixtures")

NOW = datetime.datetime(2026, 10, 19, 12, 0, 0, tzinfo=datetime.timezone.utc)
SECRET = "test-proxy-secret"


def order_node(days_ago: float = 0, name: str = "#1043", status: str = "UNFULFILLED", tracking=None) -> dict:
    """Build an order node shaped like the Shopify GraphQL response."""
    created = NOW - datetime.timedelta(days=days_ago)
    fulfillments = [{"trackingInfo": tracking}] if tracking is not None else []
    return {
        "id": "gid://shopify/Order/1",
        "name": name,
        "createdAt": created.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "displayFulfillmentStatus": status,
        "fulfillments": fulfillments,
    }


def orders_response(*nodes: dict) -> dict:
    return {"data": {"orders": {"edges": [{"node": n} for n in nodes]}}}


class FakeShopify:
    """Records GraphQL calls and answers them with a canned response."""

    def __init__(self, body=None, status_code: int = 200):
        self.body = body if body is not None else orders_response()
        self.status_code = status_code
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        fixture_logger.info(f"Fake Shopify received {request.method} {request.url}")
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_variables(self) -> dict:
        return json.loads(self.requests[-1].content)["variables"]

    def client(self) -> ShopifyClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return ShopifyClient("example.myshopify.com", "shpat_test", "2026-01", http_client=http_client)


@pytest.fixture
def fake_shopify():
    return FakeShopify()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        shopify_shop="example.myshopify.com",
        shopify_access_token="shpat_test",
        shopify_api_secret=SECRET,
    )
