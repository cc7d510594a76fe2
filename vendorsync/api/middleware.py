"""Lifespan middleware for the vendorsync Falcon ASGI application.

On shutdown the middleware first waits for in-flight push processing, so a
rolling restart does not drop picks that were already acknowledged, and
then closes the HTTP clients the collaborators own.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(
        middleware=[ShutdownMiddleware(dispatcher, closers=(client.aclose,))]
    )

"""

from __future__ import annotations

import typing as typ

from vendorsync.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["Drainable", "ShutdownMiddleware"]

logger = get_logger(__name__)


class Drainable(typ.Protocol):
    """Something with background work that can be awaited."""

    @property
    def pending(self) -> int:
        """Return the amount of outstanding work."""
        ...

    async def drain(self) -> None:
        """Wait for all outstanding work."""
        ...


class ShutdownMiddleware:
    """Drain background work and release resources at ASGI shutdown.

    Parameters
    ----------
    dispatcher
        Owner of the background push-processing tasks.
    closers
        Coroutine functions releasing resources, awaited in order after the
        dispatcher has drained.

    """

    def __init__(
        self,
        dispatcher: Drainable,
        *,
        closers: cabc.Sequence[cabc.Callable[[], cabc.Awaitable[None]]] = (),
    ) -> None:
        """Bind the dispatcher and resource closers."""
        self._dispatcher = dispatcher
        self._closers = tuple(closers)

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Handle the ASGI lifespan shutdown event."""
        pending = self._dispatcher.pending
        if pending:
            log_info(logger, "Waiting for %d push event(s) to finish", pending)
        await self._dispatcher.drain()
        for close in self._closers:
            await close()
