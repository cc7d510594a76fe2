"""Webhook endpoint receiving GitHub deliveries.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/hook", WebhookResource(validator, dispatcher))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon

from vendorsync.dispatcher import DispatchError
from vendorsync.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from vendorsync.api.signature import WebhookValidator

__all__ = ["ACKNOWLEDGEMENT", "DeliverySink", "WebhookResource"]

ACKNOWLEDGEMENT = "Event received. Have a nice day."

logger = get_logger(__name__)


class DeliverySink(typ.Protocol):
    """Receiver of authenticated deliveries."""

    def submit(self, event_type: str, delivery_id: str, payload: bytes) -> object:
        """Accept one delivery for processing."""
        ...


class WebhookResource:
    """Authenticate deliveries, acknowledge them, then hand them on.

    The acknowledgement is written as soon as the signature checks out.
    Problems with the event itself (an unexpected kind, an undecodable body)
    are logged against the delivery id rather than reported to GitHub, which
    cannot act on them.
    """

    def __init__(self, validator: WebhookValidator, sink: DeliverySink) -> None:
        """Bind the signature validator and the delivery sink."""
        self._validator = validator
        self._sink = sink

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /hook requests.

        Parameters
        ----------
        req
            Falcon request carrying the GitHub headers and JSON body.
        resp
            Falcon response populated with the acknowledgement.

        Raises
        ------
        WebhookValidationError
            Translated by the registered error handler into a 400 or 403.

        """
        body = await req.stream.read()
        delivery = self._validator.validate(req.headers, body)

        resp.status = HTTPStatus.OK
        resp.content_type = falcon.MEDIA_TEXT
        resp.text = ACKNOWLEDGEMENT

        try:
            self._sink.submit(
                delivery.event_type, delivery.delivery_id, delivery.payload
            )
        except DispatchError as exc:
            log_error(
                logger,
                "Error handling delivery %s (%s): %s",
                exc.delivery_id,
                exc.event_type,
                exc,
            )
