"""Service configuration read from the environment.

Usage
-----
Load configuration once at start-up:

>>> import os
>>> os.environ["VENDORSYNC_FORK_MAPPINGS_FILE"] = "/etc/vendorsync/forks.yaml"
>>> config = ServiceConfig.from_env()
>>> config.dry_run
True

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path
from urllib.parse import urlsplit

__all__ = ["ConfigurationError", "ServiceConfig", "read_secret"]

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class ConfigurationError(ValueError):
    """Raised when the environment does not describe a runnable service."""


@dc.dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Settings shared by every component of the service.

    Attributes
    ----------
    fork_mappings_file
        YAML file mapping short repository names to forks.
    webhook_secret_file
        File holding the shared HMAC secret for webhook signatures.
    github_token_file
        File holding the GitHub token used for pushes and pull requests.
    github_endpoint
        Base URL of the GitHub REST API.
    git_base_url
        Base URL clones and pushes are made against.
    bot_name
        Login owning pushed branches; looked up from GitHub when ``None``.
    commit_user_name
        ``user.name`` set on clones.
    commit_user_email
        ``user.email`` set on clones.
    dry_run
        Apply patches but never push or open pull requests. Defaults to
        ``True`` so a misconfigured deployment cannot write to forks.
    git_timeout_s
        Limit for a single git process.
    http_timeout_s
        Limit for a single HTTP request.
    step_timeout_s
        Limit for a single workflow step.
    max_concurrent_groups
        Destination groups processed at once per push.

    """

    fork_mappings_file: Path
    webhook_secret_file: Path = Path("/etc/webhook/hmac")
    github_token_file: Path = Path("/etc/github/oauth")
    github_endpoint: str = "https://api.github.com"
    git_base_url: str = "https://github.com"
    bot_name: str | None = None
    commit_user_name: str = "vendorpicker"
    commit_user_email: str = "vendorpicker@localhost"
    dry_run: bool = True
    git_timeout_s: float = 300.0
    http_timeout_s: float = 30.0
    step_timeout_s: float = 600.0
    max_concurrent_groups: int = 4

    @staticmethod
    def _parse_positive_float(env_var: str, default: float) -> float:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number, got: {raw!r}"
            raise ConfigurationError(msg) from exc
        if value <= 0:
            msg = f"{env_var} must be positive, got: {value}"
            raise ConfigurationError(msg)
        return value

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ConfigurationError(msg) from exc
        if value < 1:
            msg = f"{env_var} must be positive, got: {value}"
            raise ConfigurationError(msg)
        return value

    @staticmethod
    def _parse_bool(env_var: str, *, default: bool) -> bool:
        raw = os.environ.get(env_var, "").strip().lower()
        if not raw:
            return default
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        msg = f"{env_var} must be a boolean, got: {raw!r}"
        raise ConfigurationError(msg)

    @staticmethod
    def _parse_url(env_var: str, default: str) -> str:
        raw = os.environ.get(env_var, "").strip() or default
        parts = urlsplit(raw)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            msg = f"{env_var} must be an http(s) URL, got: {raw!r}"
            raise ConfigurationError(msg)
        return raw.rstrip("/")

    @staticmethod
    def _optional(env_var: str) -> str | None:
        raw = os.environ.get(env_var, "").strip()
        return raw or None

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Create configuration from ``VENDORSYNC_*`` environment variables.

        ``VENDORSYNC_FORK_MAPPINGS_FILE`` is required; every other variable
        falls back to the attribute default.

        Raises
        ------
        ConfigurationError
            If a variable is missing or malformed.

        """
        mappings_file = cls._optional("VENDORSYNC_FORK_MAPPINGS_FILE")
        if mappings_file is None:
            msg = "VENDORSYNC_FORK_MAPPINGS_FILE must be set"
            raise ConfigurationError(msg)

        defaults = cls(fork_mappings_file=Path(mappings_file))
        return dc.replace(
            defaults,
            webhook_secret_file=Path(
                cls._optional("VENDORSYNC_WEBHOOK_SECRET_FILE")
                or defaults.webhook_secret_file
            ),
            github_token_file=Path(
                cls._optional("VENDORSYNC_GITHUB_TOKEN_FILE")
                or defaults.github_token_file
            ),
            github_endpoint=cls._parse_url(
                "VENDORSYNC_GITHUB_ENDPOINT", defaults.github_endpoint
            ),
            git_base_url=cls._parse_url(
                "VENDORSYNC_GIT_BASE_URL", defaults.git_base_url
            ),
            bot_name=cls._optional("VENDORSYNC_BOT_NAME"),
            commit_user_name=cls._optional("VENDORSYNC_COMMIT_USER_NAME")
            or defaults.commit_user_name,
            commit_user_email=cls._optional("VENDORSYNC_COMMIT_USER_EMAIL")
            or defaults.commit_user_email,
            dry_run=cls._parse_bool("VENDORSYNC_DRY_RUN", default=defaults.dry_run),
            git_timeout_s=cls._parse_positive_float(
                "VENDORSYNC_GIT_TIMEOUT_S", defaults.git_timeout_s
            ),
            http_timeout_s=cls._parse_positive_float(
                "VENDORSYNC_HTTP_TIMEOUT_S", defaults.http_timeout_s
            ),
            step_timeout_s=cls._parse_positive_float(
                "VENDORSYNC_STEP_TIMEOUT_S", defaults.step_timeout_s
            ),
            max_concurrent_groups=cls._parse_positive_int(
                "VENDORSYNC_MAX_CONCURRENT_GROUPS", defaults.max_concurrent_groups
            ),
        )


def read_secret(path: Path) -> str:
    """Return the stripped contents of a secret file.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or is blank.

    """
    try:
        value = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        msg = f"cannot read secret file {path}: {exc}"
        raise ConfigurationError(msg) from exc
    if not value:
        msg = f"secret file {path} is empty"
        raise ConfigurationError(msg)
    return value
