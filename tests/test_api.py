# tests/test_api.py

import logging

import pytest
from fastapi.testclient import TestClient

from conftest import NOW, SECRET, FakeShopify, order_node, orders_response
from order_status.config import Settings
from order_status.handlers.order_status import OrderStatusService
from order_status.main import LOG_HANDLER_NAME, configure_logging, create_app
from order_status.security.proxy_signature import sign_params


def _client(settings: Settings, fake: FakeShopify, secret=SECRET) -> TestClient:
    service = OrderStatusService(fake.client(), signing_secret=secret, clock=lambda: NOW)
    return TestClient(create_app(settings, service=service))


def _signed(params: dict) -> dict:
    return {**params, "signature": sign_params(params, SECRET)}


def test_health(settings, fake_shopify):
    resp = _client(settings, fake_shopify).get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_root(settings, fake_shopify):
    resp = _client(settings, fake_shopify).get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"


@pytest.mark.parametrize("path", ["/apps/order-status", "/api/order-status"])
def test_json_status(settings, path):
    fake = FakeShopify(orders_response(order_node(days_ago=0, name="#1043")))

    resp = _client(settings, fake).get(path, params=_signed({"order": "1043"}))

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    body = resp.json()
    assert body["orderName"] == "#1043"
    assert body["stage"] == "processing"
    assert body["daysSince"] == 0
    assert list(body) == ["orderName", "createdAt", "daysSince", "stage", "message"]


def test_html_status_highlights_timeline(settings):
    fake = FakeShopify(orders_response(order_node(days_ago=3, name="#1043")))

    resp = _client(settings, fake).get(
        "/apps/order-status",
        params=_signed({"order": "1043"}),
        headers={"accept": "text/html,application/xhtml+xml"},
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "text/html; charset=utf-8"
    assert "#1043" in resp.text
    assert 'data-stage="packing"' in resp.text
    assert '<li class="step done">Processing</li>' in resp.text
    assert '<li class="step done">Packing</li>' in resp.text
    assert '<li class="step">Shipped</li>' in resp.text
    assert "Days since order: 3" in resp.text


def test_html_escapes_order_name(settings):
    fake = FakeShopify(orders_response(order_node(name="<script>x</script>")))

    resp = _client(settings, fake).get(
        "/apps/order-status", params=_signed({"order": "1043"}), headers={"accept": "text/html"}
    )

    assert "<script>x</script>" not in resp.text
    assert "&lt;script&gt;" in resp.text


def test_missing_signature_is_401(settings):
    fake = FakeShopify(orders_response(order_node()))

    resp = _client(settings, fake).get("/apps/order-status", params={"order": "1043"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized proxy request", "reason": "missing signature"}
    assert fake.requests == []


def test_hmac_alias_is_accepted(settings):
    fake = FakeShopify(orders_response(order_node()))
    params = {"order": "1043", "shop": "example.myshopify.com"}
    params["hmac"] = sign_params(params, SECRET)

    resp = _client(settings, fake).get("/apps/order-status", params=params)

    assert resp.status_code == 200


def test_no_secret_skips_verification(settings):
    fake = FakeShopify(orders_response(order_node()))

    resp = _client(settings, fake, secret=None).get("/apps/order-status", params={"order": "1043"})

    assert resp.status_code == 200


def test_missing_order_is_400(settings):
    resp = _client(settings, FakeShopify()).get("/apps/order-status", params=_signed({"order": "  "}))

    assert resp.status_code == 400
    assert resp.json()["error"] == "missing order parameter"
    assert "hint" in resp.json()


def test_unknown_order_is_404(settings):
    resp = _client(settings, FakeShopify(orders_response())).get("/apps/order-status", params=_signed({"order": "9"}))

    assert resp.status_code == 404
    assert resp.json()["error"] == "order not found"


def test_upstream_failure_is_500(settings):
    fake = FakeShopify({"errors": [{"message": "Throttled"}]})

    resp = _client(settings, fake).get("/apps/order-status", params=_signed({"order": "1043"}))

    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error", "message": "Throttled"}


def test_error_list_without_message_is_500_not_404(settings):
    fake = FakeShopify({"errors": [{"extensions": {"code": "THROTTLED"}}], "data": None})

    resp = _client(settings, fake).get("/apps/order-status", params=_signed({"order": "1043"}))

    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error", "message": "upstream error (status 200)"}


def test_unexpected_failure_is_500(settings):
    class Broken:
        async def find_order(self, search):
            raise RuntimeError("boom")

    service = OrderStatusService(Broken(), clock=lambda: NOW)
    client = TestClient(create_app(settings, service=service))

    resp = client.get("/apps/order-status", params={"order": "1043"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error", "message": "boom"}


def test_missing_configuration_is_500():
    settings = Settings(_env_file=None, shopify_shop="", shopify_access_token="")

    resp = TestClient(create_app(settings)).get("/apps/order-status", params={"order": "1043"})

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "missing configuration",
        "message": "Missing SHOPIFY_SHOP / SHOPIFY_ACCESS_TOKEN env",
    }


def test_health_available_without_configuration():
    settings = Settings(_env_file=None, shopify_shop="", shopify_access_token="")
    assert TestClient(create_app(settings)).get("/health").status_code == 200


def test_openapi_documents_error_schema(settings, fake_shopify):
    schema = _client(settings, fake_shopify).get("/openapi.json").json()

    responses = schema["paths"]["/apps/order-status"]["get"]["responses"]
    for status in ("400", "401", "404", "500"):
        ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")
    assert "ErrorResponse" in schema["components"]["schemas"]


def test_configure_logging_installs_one_handler():
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    level = root_logger.level

    configure_logging("INFO")
    configure_logging("DEBUG")

    named = [h for h in root_logger.handlers if h.get_name() == LOG_HANDLER_NAME]
    assert len(named) == 1
    assert root_logger.level == logging.DEBUG

    for handler in root_logger.handlers[:]:
        if handler not in before:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
