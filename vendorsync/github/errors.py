"""GitHub collaborator errors."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, operation: str, status_code: int) -> GitHubAPIError:
        """Return an error for a non-2xx response to ``operation``."""
        return cls(
            f"GitHub {operation} failed: HTTP {status_code}", status_code=status_code
        )

    @classmethod
    def transport_error(cls, operation: str, exc: Exception) -> GitHubAPIError:
        """Return an error for a connection-level failure."""
        return cls(f"GitHub {operation} failed: {exc}")


class GitHubTimeoutError(GitHubAPIError):
    """Raised when a GitHub request exceeds its timeout."""

    @classmethod
    def timed_out(cls, operation: str, timeout_s: float) -> GitHubTimeoutError:
        """Return an error for ``operation`` exceeding ``timeout_s`` seconds."""
        return cls(f"GitHub {operation} timed out after {timeout_s:g}s")


class GitHubResponseShapeError(RuntimeError):
    """Raised when a GitHub response is missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub response missing expected field: {field}")


class PatchFetchError(GitHubAPIError):
    """Raised when the patch for a commit cannot be downloaded."""

    def __init__(
        self, message: str, *, commit_id: str, status_code: int | None = None
    ) -> None:
        """Initialise with the commit whose patch was requested."""
        self.commit_id = commit_id
        super().__init__(message, status_code=status_code)

    @classmethod
    def bad_status(cls, commit_id: str, status_code: int) -> PatchFetchError:
        """Return an error for a non-2xx patch response."""
        return cls(
            f"cannot get patch for commit {commit_id}: HTTP {status_code}",
            commit_id=commit_id,
            status_code=status_code,
        )


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
