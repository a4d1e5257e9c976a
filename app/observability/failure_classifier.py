"""Failure categorization for metrics and audit-failure reports. Maps exceptions to taxonomy."""

from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from app.application.exceptions import ApplicationError, ConflictError, NotFoundError
from app.audit.exceptions import AuditError, AuditWriteError
from app.domain.exceptions import DomainError, DomainValidationError
from app.security.exceptions import AuthenticationError, AuthorizationError, SecurityError


class FailureCategory(str, Enum):
    """Taxonomy for failure classification."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    STORE_ERROR = "STORE_ERROR"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    AUDIT_ERROR = "AUDIT_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class FailureClassifier:
    """
    Classifies exceptions into FailureCategory. Used by the error reporter;
    callers decide what to do with the category.
    """

    @staticmethod
    def classify(exception: BaseException) -> FailureCategory:
        """Map exception to FailureCategory. Unknown -> UNEXPECTED_ERROR."""
        if isinstance(exception, DomainValidationError):
            return FailureCategory.VALIDATION_ERROR
        if isinstance(exception, (AuthenticationError, AuthorizationError)):
            return FailureCategory.POLICY_VIOLATION
        if isinstance(exception, NotFoundError):
            return FailureCategory.NOT_FOUND
        if isinstance(exception, ConflictError):
            return FailureCategory.CONFLICT
        if isinstance(exception, (AuditWriteError, SQLAlchemyError, ConnectionError, TimeoutError)):
            return FailureCategory.STORE_ERROR
        if isinstance(exception, (TypeError, ValueError)):
            return FailureCategory.SERIALIZATION_ERROR
        if isinstance(exception, AuditError):
            return FailureCategory.AUDIT_ERROR
        if isinstance(exception, (DomainError, ApplicationError, SecurityError)):
            return FailureCategory.VALIDATION_ERROR
        return FailureCategory.UNEXPECTED_ERROR
