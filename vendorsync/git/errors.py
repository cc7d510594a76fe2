"""Errors raised by source-control drivers."""

from __future__ import annotations

_OUTPUT_PREVIEW_LIMIT = 2000


class GitCommandError(RuntimeError):
    """Raised when a git invocation exits unsuccessfully.

    Attributes
    ----------
    operation
        Short description of what was attempted, e.g. ``"checkout master"``.
    returncode
        Process exit status, or ``None`` when the process never finished.
    output
        Combined stdout and stderr, truncated for log friendliness.

    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        """Initialise with the failed operation and its process details."""
        self.operation = operation
        self.returncode = returncode
        self.output = output
        super().__init__(message)

    @classmethod
    def failed(cls, operation: str, returncode: int, output: str) -> GitCommandError:
        """Return an error for a non-zero exit status."""
        preview = output.strip()[-_OUTPUT_PREVIEW_LIMIT:]
        return cls(
            f"git {operation} exited with status {returncode}: {preview}",
            operation=operation,
            returncode=returncode,
            output=preview,
        )

    @classmethod
    def not_started(cls, operation: str, exc: OSError) -> GitCommandError:
        """Return an error when the git executable could not be launched."""
        return cls(f"git {operation} could not start: {exc}", operation=operation)


class GitTimeoutError(GitCommandError):
    """Raised when a git invocation exceeds its timeout and is killed."""

    @classmethod
    def timed_out(cls, operation: str, timeout_s: float) -> GitTimeoutError:
        """Return an error for ``operation`` exceeding ``timeout_s`` seconds."""
        return cls(
            f"git {operation} timed out after {timeout_s:g}s",
            operation=operation,
        )
