"""Authenticate GitHub webhook deliveries.

GitHub signs each body with the hook's shared secret and sends the digest
in ``X-Hub-Signature-256`` (``sha256=<hex>``). Older hooks only send
``X-Hub-Signature`` (``sha1=<hex>``), which is accepted when the SHA-256
header is absent.
"""

from __future__ import annotations

import dataclasses
import hashlib
import hmac
import typing as typ

from .errors import (
    InvalidSignatureError,
    MissingHeaderError,
    UnsupportedContentTypeError,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "DELIVERY_HEADER",
    "EVENT_HEADER",
    "SIGNATURE_256_HEADER",
    "SIGNATURE_SHA1_HEADER",
    "WebhookDelivery",
    "WebhookValidator",
    "sign_payload",
]

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"
SIGNATURE_256_HEADER = "X-Hub-Signature-256"
SIGNATURE_SHA1_HEADER = "X-Hub-Signature"
JSON_CONTENT_TYPE = "application/json"


@dataclasses.dataclass(frozen=True, slots=True)
class WebhookDelivery:
    """An authenticated delivery ready for dispatch."""

    event_type: str
    delivery_id: str
    payload: bytes


class WebhookValidator:
    """Check headers and the HMAC signature of incoming deliveries."""

    def __init__(self, secret: bytes | str) -> None:
        """Bind the shared secret."""
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else secret
        if not self._secret:
            msg = "webhook secret must be non-empty"
            raise ValueError(msg)

    def validate(
        self, headers: cabc.Mapping[str, str], body: bytes
    ) -> WebhookDelivery:
        """Return the delivery described by ``headers`` and ``body``.

        Header names are matched case-insensitively.

        Raises
        ------
        MissingHeaderError
            If the event or delivery header is absent.
        UnsupportedContentTypeError
            If the body is not declared as JSON.
        InvalidSignatureError
            If no signature is present or it does not match ``body``.

        """
        lowered = {name.lower(): value for name, value in headers.items()}

        event_type = _require(lowered, EVENT_HEADER)
        delivery_id = _require(lowered, DELIVERY_HEADER)

        content_type = lowered.get("content-type")
        if not content_type or content_type.split(";")[0].strip() != JSON_CONTENT_TYPE:
            raise UnsupportedContentTypeError(content_type)

        self._verify(lowered, body)
        return WebhookDelivery(
            event_type=event_type, delivery_id=delivery_id, payload=body
        )

    def _verify(self, headers: dict[str, str], body: bytes) -> None:
        signature = headers.get(SIGNATURE_256_HEADER.lower())
        algorithm = "sha256"
        if signature is None:
            signature = headers.get(SIGNATURE_SHA1_HEADER.lower())
            algorithm = "sha1"
        if not signature:
            msg = f"{SIGNATURE_256_HEADER} header is required"
            raise InvalidSignatureError(msg)

        prefix = f"{algorithm}="
        if not signature.startswith(prefix):
            msg = f"signature must start with {prefix!r}"
            raise InvalidSignatureError(msg)

        expected = prefix + hmac.new(self._secret, body, algorithm).hexdigest()
        if not hmac.compare_digest(expected, signature):
            msg = "signature does not match payload"
            raise InvalidSignatureError(msg)


def sign_payload(secret: bytes, body: bytes) -> str:
    """Return the ``X-Hub-Signature-256`` value for ``body``."""
    return "sha256=" + hmac.new(secret, body, hashlib.sha256).hexdigest()


def _require(headers: dict[str, str], name: str) -> str:
    value = headers.get(name.lower(), "").strip()
    if not value:
        raise MissingHeaderError(name)
    return value
