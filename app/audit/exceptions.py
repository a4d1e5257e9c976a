"""Audit-subsystem exceptions. Typed, no HTTP."""


class AuditError(Exception):
    """Base for all audit-subsystem errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidHookTransitionError(AuditError):
    """Raised when a hook chain is driven through phases out of order."""


class AuditWriteError(AuditError):
    """Raised by audit stores when a record cannot be appended."""
