"""ASGI app entrypoint for the Order Status service.

This module exposes the FastAPI `app` object, built by `create_app` from
environment-driven settings, and includes a minimal healthcheck endpoint
used by orchestration tooling.

Run with: uvicorn order_status.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import order_status as order_status_router
from .config import Settings
from .errors import ConfigurationError, OrderStatusError
from .handlers.order_status import OrderStatusService
from .schemas import ErrorResponse, HealthResponse

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
LOG_HANDLER_NAME = "order_status"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Install a single root StreamHandler and quiet the HTTP client loggers."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Repeated calls (tests, reloads) reuse the handler installed on the first call
    handler_exists = any(h.get_name() == LOG_HANDLER_NAME for h in root_logger.handlers)
    if not handler_exists:
        handler = logging.StreamHandler()
        handler.set_name(LOG_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    for logger_name in ["httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


async def handle_order_status_error(request: Request, exc: OrderStatusError) -> JSONResponse:
    # Every error body goes through the documented ErrorResponse schema
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


def create_app(settings: Optional[Settings] = None, service: Optional[OrderStatusService] = None) -> FastAPI:
    """Build the application.

    Store configuration is validated once here. If it is incomplete the app
    still starts, and the order-status route answers 500 with the stored
    configuration error.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    config_error: Optional[ConfigurationError] = None
    if service is None:
        try:
            service = OrderStatusService.from_config(settings.store_config(), timeout=settings.shopify_timeout)
        except ConfigurationError as exc:
            logger.error("Order status service disabled: %s", exc.message)
            config_error = exc

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("%s starting", settings.app_name)
        yield
        if service is not None:
            await service.aclose()
        logger.info("%s shutting down", settings.app_name)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.order_status_service = service
    app.state.config_error = config_error

    app.add_exception_handler(OrderStatusError, handle_order_status_error)
    app.include_router(order_status_router.router, tags=["order-status"])

    # Minimal health endpoint used for readiness/liveness checks
    @app.get("/health", response_model=HealthResponse, status_code=200)
    async def health() -> HealthResponse:
        """Return a simple health status in a predictable JSON schema."""
        return HealthResponse()

    @app.get("/")
    async def root() -> dict:
        return {"app": settings.app_name, "status": "running"}

    return app


app = create_app()
