"""HTTP surface of vendorsync: the webhook endpoint and health probes.

Usage
-----
Build the ASGI app from wired dependencies::

    from vendorsync.api import AppDependencies, create_app

    app = create_app(AppDependencies(validator=validator, dispatcher=dispatcher))
"""

from __future__ import annotations

from .app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
