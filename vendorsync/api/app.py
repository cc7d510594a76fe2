"""Application factory for the vendorsync Falcon ASGI application.

This module provides ``create_app()`` which builds and configures the
Falcon ASGI application with health endpoints and, when webhook
dependencies are available, the ``POST /hook`` endpoint.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app receiving webhook deliveries::

    from vendorsync.api.app import AppDependencies, create_app

    deps = AppDependencies(validator=validator, dispatcher=dispatcher)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from vendorsync.api.errors import (
    WebhookValidationError,
    handle_webhook_validation_error,
)
from vendorsync.api.health.resources import HealthResource, ReadyResource
from vendorsync.api.middleware import ShutdownMiddleware
from vendorsync.api.webhook import WebhookResource

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from vendorsync.api.signature import WebhookValidator
    from vendorsync.dispatcher import WebhookDispatcher

__all__ = ["HOOK_ROUTE", "AppDependencies", "create_app"]

HOOK_ROUTE = "/hook"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    validator
        Authenticates incoming deliveries.
    dispatcher
        Schedules push processing and is drained at shutdown.
    closers
        Coroutine functions releasing owned clients at shutdown.
    fork_mappings
        Number of loaded fork mappings, reported by ``/ready``.

    """

    validator: WebhookValidator
    dispatcher: WebhookDispatcher
    closers: cabc.Sequence[cabc.Callable[[], cabc.Awaitable[None]]] = ()
    fork_mappings: int | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only ``/health``
        and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = []
    if dependencies is not None:
        middleware.append(
            ShutdownMiddleware(dependencies.dispatcher, closers=dependencies.closers)
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    # Health endpoints are always available
    app.add_route("/health", HealthResource())
    app.add_route(
        "/ready",
        ReadyResource(
            fork_mappings=None if dependencies is None else dependencies.fork_mappings
        ),
    )

    if dependencies is not None:
        app.add_route(
            HOOK_ROUTE,
            WebhookResource(dependencies.validator, dependencies.dispatcher),
        )

    app.add_error_handler(WebhookValidationError, handle_webhook_validation_error)

    return app
