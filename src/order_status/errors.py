"""Error types raised while answering an order-status request.

Each error carries the HTTP status it maps to and renders itself as the
structured `{error, hint?, reason?, message?}` body returned to the caller.
All of them are terminal for the request.
"""

from typing import Any, Dict, Optional


class OrderStatusError(Exception):
    """Base class for every error surfaced to the storefront."""

    status_code = 500
    error = "Server error"

    def __init__(
        self,
        error: Optional[str] = None,
        *,
        hint: Optional[str] = None,
        reason: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        if error:
            self.error = error
        self.hint = hint
        self.reason = reason
        self.message = message
        super().__init__(message or reason or self.error)

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.error, "hint": self.hint, "reason": self.reason, "message": self.message}
        return {k: v for k, v in body.items() if v}


class ConfigurationError(OrderStatusError):
    """Shop domain or access token is missing."""

    status_code = 500
    error = "missing configuration"


class AuthenticationError(OrderStatusError):
    """The app-proxy signature is missing or does not match."""

    status_code = 401
    error = "Unauthorized proxy request"


class ValidationError(OrderStatusError):
    """The request lacks a usable order identifier."""

    status_code = 400
    error = "missing order parameter"


class NotFoundError(OrderStatusError):
    """The lookup was well-formed but matched no order."""

    status_code = 404
    error = "order not found"


class ServerError(OrderStatusError):
    status_code = 500
    error = "Server error"


class UpstreamError(ServerError):
    """The commerce API call failed at the transport or protocol level."""
