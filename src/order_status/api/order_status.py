"""Order status endpoint called by the storefront app proxy.

The proxy forwards `GET /apps/order-status?order=...&email=...&signature=...`.
The same handler is also exposed at `/api/order-status` for direct calls.
"""

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse

from .. import errors
from ..handlers.order_status import OrderStatusService
from ..handlers.render import render_status_page, wants_html
from ..schemas import ErrorResponse, OrderStatusPayload

logger = logging.getLogger(__name__)

# Primary router, included at the application root in main
router = APIRouter()

# Documented error bodies; all of them share the ErrorResponse schema
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing order parameter"},
    401: {"model": ErrorResponse, "description": "Missing or invalid proxy signature"},
    404: {"model": ErrorResponse, "description": "No order matched"},
    500: {"model": ErrorResponse, "description": "Missing configuration or upstream failure"},
}


def _service(request: Request) -> OrderStatusService:
    """Return the configured service or re-raise the startup configuration error."""
    service = getattr(request.app.state, "order_status_service", None)
    if service is None:
        raise getattr(request.app.state, "config_error", None) or errors.ConfigurationError()
    return service


@router.get("/apps/order-status", response_model=OrderStatusPayload, responses=ERROR_RESPONSES)
@router.get("/api/order-status", response_model=OrderStatusPayload, responses=ERROR_RESPONSES)
async def order_status(request: Request) -> Response:
    """Resolve the order's fulfillment stage and render it as JSON or HTML."""
    # Fails fast with 500 when the store credentials were missing at startup
    service = _service(request)

    # Repeated keys collapse to their last value
    params = dict(request.query_params)
    try:
        payload = await service.query(params)
    except errors.OrderStatusError:
        # Already carries its status and body; let the app handler render it
        raise
    except Exception as exc:
        logger.exception("Order status lookup failed: %s", exc)
        raise errors.ServerError(message=str(exc) or type(exc).__name__) from exc

    # Storefront pages ask for HTML; everything else gets JSON
    if wants_html(request.headers.get("accept")):
        return HTMLResponse(content=render_status_page(payload))

    return JSONResponse(content=payload.to_json())
