"""vendorsync runtime entrypoint for container deployments.

This module provides the ASGI application factory used by Granian. It
reads :class:`~vendorsync.config.ServiceConfig` from the environment, loads
the fork mapping table and the two secrets, wires the pick workflow and
delegates to :func:`vendorsync.api.app.create_app`.

Server configuration is driven by environment variables:

- ``VENDORSYNC_HOST``: Bind address (default ``0.0.0.0``)
- ``VENDORSYNC_PORT``: Listen port (default ``8888``)
- ``VENDORSYNC_LOG_LEVEL``: Log level (default ``INFO``)

Run the service directly with ``python -m vendorsync.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from vendorsync.config import ConfigurationError, ServiceConfig, read_secret
from vendorsync.forks import ForkMappingError, load_fork_mappings
from vendorsync.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

    from vendorsync.api.app import AppDependencies
    from vendorsync.forks import ForkMappingTable

__all__ = ["build_dependencies", "create_app", "main"]

logger = get_logger(__name__)

USER_AGENT = "vendorsync/0.1"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid VENDORSYNC_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def build_dependencies(
    config: ServiceConfig,
    table: ForkMappingTable,
    *,
    webhook_secret: str,
    github_token: str,
) -> AppDependencies:
    """Wire the pick workflow behind the webhook endpoint.

    Parameters
    ----------
    config
        Service configuration.
    table
        Loaded fork mapping table.
    webhook_secret
        Shared HMAC secret for delivery signatures.
    github_token
        Token used for clones, pushes and pull requests.

    Returns
    -------
    AppDependencies
        Dependencies for :func:`vendorsync.api.app.create_app`.

    """
    from vendorsync.api.app import AppDependencies
    from vendorsync.api.signature import WebhookValidator
    from vendorsync.dispatcher import WebhookDispatcher
    from vendorsync.git import SubprocessGitDriver
    from vendorsync.github import GitHubRESTClient, GitHubRESTConfig, HTTPPatchSource
    from vendorsync.picks import (
        PickCollaborators,
        PickOrchestrator,
        PickSettings,
        PushEventProcessor,
    )

    pull_requests = GitHubRESTClient(
        GitHubRESTConfig(
            token=github_token,
            endpoint=config.github_endpoint,
            timeout_s=config.http_timeout_s,
            user_agent=USER_AGENT,
        )
    )
    patches = HTTPPatchSource(timeout_s=config.http_timeout_s, user_agent=USER_AGENT)
    driver = SubprocessGitDriver(
        base_url=config.git_base_url,
        username=config.bot_name,
        token=github_token,
        timeout_s=config.git_timeout_s,
    )
    orchestrator = PickOrchestrator(
        PickCollaborators(driver=driver, patches=patches, pull_requests=pull_requests),
        settings=PickSettings(
            commit_user_name=config.commit_user_name,
            commit_user_email=config.commit_user_email,
            bot_name=config.bot_name,
            dry_run=config.dry_run,
            step_timeout_s=config.step_timeout_s,
        ),
    )
    processor = PushEventProcessor(
        table,
        orchestrator,
        max_concurrent_groups=config.max_concurrent_groups,
    )
    return AppDependencies(
        validator=WebhookValidator(webhook_secret),
        dispatcher=WebhookDispatcher(processor),
        closers=(pull_requests.aclose, patches.aclose),
        fork_mappings=len(table),
    )


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application serving ``/hook``, ``/health``
        and ``/ready``.

    Raises
    ------
    SystemExit
        If the configuration, the fork mappings or a secret is unusable.

    """
    from vendorsync.api.app import create_app as _create_api_app

    try:
        config = ServiceConfig.from_env()
        table = load_fork_mappings(config.fork_mappings_file)
        webhook_secret = read_secret(config.webhook_secret_file)
        github_token = read_secret(config.github_token_file)
    except (ConfigurationError, ForkMappingError) as exc:
        log_error(logger, "Cannot start vendorsync: %s", exc)
        raise SystemExit(1) from exc

    log_info(
        logger,
        "Loaded %d fork mapping(s) from %s (dry_run=%s)",
        len(table),
        config.fork_mappings_file,
        config.dry_run,
    )
    if config.dry_run:
        log_warning(logger, "Dry-run mode: no branches are pushed and no PRs opened")

    deps = build_dependencies(
        config, table, webhook_secret=webhook_secret, github_token=github_token
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the vendorsync server using Granian.

    Reads ``VENDORSYNC_HOST``, ``VENDORSYNC_PORT``, and
    ``VENDORSYNC_LOG_LEVEL`` from the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("VENDORSYNC_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("VENDORSYNC_PORT", "8888")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("VENDORSYNC_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid VENDORSYNC_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting vendorsync on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "vendorsync.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
