"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(ApplicationError):
    """Raised when the requested task or user does not exist."""


class ConflictError(ApplicationError):
    """Raised when creating something that already exists (e.g. duplicate email)."""


class InvalidOperationError(ApplicationError):
    """Raised when a request is well-formed but not allowed in the current state (e.g. self-deletion)."""
