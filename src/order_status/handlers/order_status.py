"""Order status lookup: signature check, order search and stage resolution.

`OrderStatusService.query` is the single entry point used by the HTTP
route. It is stateless between calls; every call performs one fresh
lookup through the injected order-lookup client.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Mapping, Optional, Protocol, Tuple

from .. import errors
from ..config import StoreConfig
from ..integrations.shopify import ShopifyClient
from ..schemas import OrderRecord, OrderStatusPayload
from ..security.proxy_signature import require_valid_signature
from .stage import resolve_stage

logger = logging.getLogger(__name__)

ORDER_HINT = "Use ?order=1043&email=customer@example.com"
NOT_FOUND_HINT = "Check the order and (ideally) email parameters"


class OrderLookup(Protocol):
    def find_order(self, search: str) -> Awaitable[Optional[OrderRecord]]: ...


def extract_search_params(params: Mapping[str, str]) -> Tuple[str, str]:
    """Return the trimmed order identifier and the normalized email.

    Raises ValidationError when no order identifier is present.
    """
    # Missing keys and whitespace-only values are treated alike
    order = (params.get("order") or "").strip()
    email = (params.get("email") or "").strip().lower()
    if not order:
        raise errors.ValidationError(hint=ORDER_HINT)
    return order, email


def build_lookup_query(order: str, email: str = "") -> str:
    """Build the search string `(name:#X OR name:X) AND email:Y`.

    Order names are stored with or without a leading `#`, so both are tried.
    """
    # Keep an existing prefix rather than doubling it
    normalized = order if order.startswith("#") else f"#{order}"
    query = f"(name:{normalized} OR name:{order})"
    if email:
        query += f" AND email:{email}"
    return query


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatusService:
    """Answer "where is my order?" for one proxied storefront request."""

    def __init__(
        self,
        lookup: OrderLookup,
        signing_secret: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.lookup = lookup
        self.signing_secret = signing_secret
        self.clock = clock

    @classmethod
    def from_config(cls, config: StoreConfig, timeout: float = 10.0) -> "OrderStatusService":
        client = ShopifyClient(config.shop, config.access_token, config.api_version, timeout=timeout)
        return cls(client, signing_secret=config.signing_secret)

    async def aclose(self) -> None:
        close = getattr(self.lookup, "aclose", None)
        if close is not None:
            await close()

    async def query(self, params: Mapping[str, str]) -> OrderStatusPayload:
        """Authenticate, look up the order and resolve its stage.

        Raises AuthenticationError, ValidationError, NotFoundError or
        UpstreamError; none of them are retried.
        """
        # Signature check first; a rejected request never reaches the store
        require_valid_signature(params, self.signing_secret)

        # Build the name/email search and run exactly one lookup
        order, email = extract_search_params(params)
        search = build_lookup_query(order, email)
        logger.info("Looking up order %s (email given: %s)", order, bool(email))

        record = await self.lookup.find_order(search)
        if record is None:
            logger.info("No order matched %s", order)
            raise errors.NotFoundError(hint=NOT_FOUND_HINT)

        # Age decides the stage unless tracking or a FULFILLED status overrides it
        result = resolve_stage(record, self.clock())
        logger.info("Order %s resolved to stage %s after %d days", record.name, result.stage.value, result.days_since)

        return OrderStatusPayload(
            order_name=record.name,
            created_at=record.created_at,
            days_since=result.days_since,
            stage=result.stage,
            message=result.message,
        )
