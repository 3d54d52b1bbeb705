"""Custom exception hierarchy for keyhound.

This module defines the exception classes used throughout keyhound for
error handling and reporting. All exceptions inherit from the base
KeyhoundError class, allowing callers to catch all keyhound errors with
a single except clause.
"""

from __future__ import annotations


class KeyhoundError(Exception):
    """Base exception for all keyhound errors.

    Attributes:
        message: Human-readable error message.
        context: Optional dictionary of additional context about the error.
    """

    def __init__(self, message: str, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            context: Optional dictionary of additional context about the error.
        """
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including context if present."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ScanError(KeyhoundError):
    """Exception raised when a scan cannot proceed at all.

    Raised for fatal issues such as the repository path not existing, git
    not being installed, or the branch list being unreadable.

    Example:
        >>> raise ScanError("Not a git repository", path="/tmp/nothing")
    """

    def __init__(self, message: str, path: str | None = None, context: dict | None = None):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message, ctx)
        self.path = path


class TraversalError(KeyhoundError):
    """Exception raised when a ref, tree, diff or history lookup fails.

    A traversal error aborts the traversal of the affected branch only;
    the scan moves on to the next branch.

    Example:
        >>> raise TraversalError("Cannot read tree", branch="main", commit="abc123")
    """

    def __init__(
        self,
        message: str,
        branch: str | None = None,
        commit: str | None = None,
        context: dict | None = None,
    ):
        ctx = context or {}
        if branch:
            ctx["branch"] = branch
        if commit:
            ctx["commit"] = commit
        super().__init__(message, ctx)
        self.branch = branch
        self.commit = commit


class GitCommandError(TraversalError):
    """Exception raised when a git invocation exits with an error."""

    def __init__(
        self,
        message: str,
        git_args: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        context: dict = {}
        if git_args:
            context["command"] = " ".join(["git", *git_args])
        if returncode is not None:
            context["returncode"] = returncode
        if stderr:
            context["stderr"] = stderr.strip()
        super().__init__(message, context=context)
        self.returncode = returncode
        self.stderr = stderr


class ValidationInconclusive(KeyhoundError):
    """Raised when a probe fails for a reason that proves nothing.

    Network errors, throttling, unknown error codes and malformed responses
    all end up here. The pair is dropped for this run and never retried.
    """

    def __init__(self, message: str, code: str | None = None, context: dict | None = None):
        ctx = context or {}
        if code:
            ctx["code"] = code
        super().__init__(message, ctx)
        self.code = code


class ConfigError(KeyhoundError):
    """Exception raised for configuration errors.

    Example:
        >>> raise ConfigError("Invalid output format", config_key="format")
    """

    def __init__(self, message: str, config_key: str | None = None, context: dict | None = None):
        ctx = context or {}
        if config_key:
            ctx["config_key"] = config_key
        super().__init__(message, ctx)
        self.config_key = config_key


class OutputError(KeyhoundError):
    """Exception raised when rendering or writing a report fails."""

    def __init__(self, message: str, output_path: str | None = None, context: dict | None = None):
        ctx = context or {}
        if output_path:
            ctx["output_path"] = output_path
        super().__init__(message, ctx)
        self.output_path = output_path
