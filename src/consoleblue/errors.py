"""Domain errors for the document assembly and publish pipeline.

Each error carries an HTTP-equivalent ``status_code`` and a short ``code``
so an upward surface (CLI, HTTP layer) can map it without string matching.
"""

from __future__ import annotations


class ConsoleBlueError(Exception):
    """Base class for all ConsoleBlue domain errors."""

    status_code: int = 500
    code: str = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ConsoleBlueError, ValueError):
    """Bad input shape or constraint. Raised before any store mutation."""

    status_code = 400
    code = "validation"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class NotFoundError(ConsoleBlueError):
    """Unknown project, fragment, or other entity."""

    status_code = 404
    code = "not_found"


class ConflictError(ConsoleBlueError):
    """Duplicate slug on create, or existing docs without force."""

    status_code = 409
    code = "conflict"


class NotConfiguredError(ConsoleBlueError):
    """Project has no repository bound. The fix is configuration, not a retry."""

    status_code = 400
    code = "not_configured"


class ServiceUnavailableError(ConsoleBlueError):
    """The VCS client has no credentials or cannot be reached."""

    status_code = 503
    code = "service_unavailable"


class PublishFailedError(ServiceUnavailableError):
    """The VCS commit call failed. Always paired with an error push-history row.

    Attributes:
        details: The VCS client's error message, verbatim.
        history_id: Id of the push-history row recording the failure.
    """

    status_code = 502
    code = "publish_failed"

    def __init__(self, details: str, history_id: int | None = None) -> None:
        super().__init__(f"GitHub push failed: {details}")
        self.details = details
        self.history_id = history_id


class InternalError(ConsoleBlueError):
    """Store unreachable or unexpected failure."""
