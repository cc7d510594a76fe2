"""Health probe resources for liveness and readiness checks.

Usage
-----
Register health endpoints on the Falcon app::

    from vendorsync.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(fork_mappings=len(table)))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    The service only starts serving once its fork mapping table has loaded,
    so readiness reports the number of mappings alongside the status.
    """

    def __init__(self, fork_mappings: int | None = None) -> None:
        """Record the size of the loaded mapping table, if any."""
        self._fork_mappings = fork_mappings

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        media: dict[str, typ.Any] = {"status": "ready"}
        if self._fork_mappings is not None:
            media["forkMappings"] = self._fork_mappings
        resp.media = media
        resp.status = HTTPStatus.OK
