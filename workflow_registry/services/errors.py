"""
Error categories raised by the service layer.

Every failed operation raises exactly one of these. They are local and
recoverable; the API layer maps them to HTTP status codes.
"""


class WorkflowServiceError(Exception):
    """Base exception for workflow service errors."""

    status_code = 500


class ConflictError(WorkflowServiceError):
    """Raised when an identity already exists."""

    status_code = 409


class NotFoundError(WorkflowServiceError):
    """Raised when a referenced identity does not exist."""

    status_code = 404


class InvalidOperationError(WorkflowServiceError):
    """Raised when a request violates a structural or state-machine invariant."""

    status_code = 400
