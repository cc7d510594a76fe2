"""Route validated webhook deliveries to their handlers.

Only ``push`` does real work; ``ping`` (sent once when the hook is created)
is acknowledged and ignored. Push processing runs as a background task so
the HTTP response never waits on git or network work; :meth:`drain` lets
callers wait for those tasks, e.g. in tests or during shutdown.
"""

from __future__ import annotations

import asyncio
import typing as typ

import msgspec

from vendorsync.github.events import decode_push_event
from vendorsync.logging import get_logger, log_exception, log_info

if typ.TYPE_CHECKING:
    from vendorsync.github.events import PushEvent
    from vendorsync.picks.models import PickOutcome

__all__ = [
    "PING_EVENT",
    "PUSH_EVENT",
    "DispatchError",
    "InvalidPayloadError",
    "PushProcessor",
    "UnsupportedEventError",
    "WebhookDispatcher",
]

logger = get_logger(__name__)

PUSH_EVENT = "push"
PING_EVENT = "ping"


class DispatchError(Exception):
    """Base class for deliveries that cannot be dispatched."""

    def __init__(self, message: str, *, event_type: str, delivery_id: str) -> None:
        """Record the delivery the error concerns."""
        self.event_type = event_type
        self.delivery_id = delivery_id
        super().__init__(message)


class UnsupportedEventError(DispatchError):
    """Raised for event kinds the hook was not subscribed to."""

    @classmethod
    def for_delivery(cls, event_type: str, delivery_id: str) -> UnsupportedEventError:
        """Return an error naming the unexpected event kind."""
        return cls(
            f"received an event of type {event_type!r} but didn't ask for it",
            event_type=event_type,
            delivery_id=delivery_id,
        )


class InvalidPayloadError(DispatchError):
    """Raised when a payload does not decode into the expected shape."""

    @classmethod
    def for_delivery(
        cls, event_type: str, delivery_id: str, exc: Exception
    ) -> InvalidPayloadError:
        """Return an error wrapping the decoder's complaint."""
        return cls(
            f"cannot decode {event_type} payload: {exc}",
            event_type=event_type,
            delivery_id=delivery_id,
        )


class PushProcessor(typ.Protocol):
    """Consumer of decoded push events."""

    async def process(self, event: PushEvent) -> list[PickOutcome]:
        """Handle one push event."""
        ...


class WebhookDispatcher:
    """Decode deliveries and schedule their processing."""

    def __init__(self, processor: PushProcessor) -> None:
        """Bind the push processor."""
        self._processor = processor
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Return the number of push events still being processed."""
        return len(self._tasks)

    def submit(
        self, event_type: str, delivery_id: str, payload: bytes
    ) -> asyncio.Task[None] | None:
        """Dispatch one delivery.

        Must be called from a running event loop. Returns the background task
        for ``push`` deliveries and ``None`` for deliveries needing no work.

        Raises
        ------
        UnsupportedEventError
            If ``event_type`` is neither ``push`` nor ``ping``.
        InvalidPayloadError
            If a push payload cannot be decoded.

        """
        if event_type == PING_EVENT:
            log_info(logger, "Received ping delivery %s", delivery_id)
            return None
        if event_type != PUSH_EVENT:
            raise UnsupportedEventError.for_delivery(event_type, delivery_id)

        try:
            event = decode_push_event(payload)
        except msgspec.DecodeError as exc:
            raise InvalidPayloadError.for_delivery(
                event_type, delivery_id, exc
            ) from exc

        task = asyncio.get_running_loop().create_task(
            self._process(delivery_id, event), name=f"push-{delivery_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every scheduled push has been processed."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)

    async def _process(self, delivery_id: str, event: PushEvent) -> None:
        try:
            outcomes = await self._processor.process(event)
        except Exception as exc:  # noqa: BLE001 - background task boundary
            log_exception(logger, f"Vendor sync failed for delivery {delivery_id}", exc)
            return
        log_info(
            logger,
            "Delivery %s processed: %d destination group(s)",
            delivery_id,
            len(outcomes),
        )
