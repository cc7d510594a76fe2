"""Webhook validation exceptions and their Falcon error handlers.

Usage
-----
Register the handler on the Falcon app::

    from vendorsync.api.errors import (
        WebhookValidationError,
        handle_webhook_validation_error,
    )

    app.add_error_handler(WebhookValidationError, handle_webhook_validation_error)

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidSignatureError",
    "MissingHeaderError",
    "UnsupportedContentTypeError",
    "WebhookValidationError",
    "handle_webhook_validation_error",
]


class WebhookValidationError(Exception):
    """Raised when a delivery fails validation and must be rejected.

    Attributes
    ----------
    status
        HTTP status written back to the sender.
    title
        Short summary placed in the JSON error body.

    """

    status: HTTPStatus = HTTPStatus.BAD_REQUEST
    title: str = "Invalid webhook"


class MissingHeaderError(WebhookValidationError):
    """Raised when a required GitHub header is absent."""

    title = "Missing header"

    def __init__(self, header: str) -> None:
        """Initialise with the missing header name."""
        self.header = header
        super().__init__(f"{header} header is required")


class UnsupportedContentTypeError(WebhookValidationError):
    """Raised when the delivery is not JSON-encoded."""

    title = "Unsupported content type"

    def __init__(self, content_type: str | None) -> None:
        """Initialise with the offending content type."""
        self.content_type = content_type
        super().__init__(
            f"content type {content_type!r} is not supported; use application/json"
        )


class InvalidSignatureError(WebhookValidationError):
    """Raised when the HMAC signature is missing or does not match."""

    status = HTTPStatus.FORBIDDEN
    title = "Invalid signature"


async def handle_webhook_validation_error(
    _req: Request,
    resp: Response,
    ex: WebhookValidationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map a :class:`WebhookValidationError` to a JSON error response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The validation failure.
    _params
        URI template parameters (unused).

    """
    resp.status = ex.status
    resp.media = {"title": ex.title, "description": str(ex)}
