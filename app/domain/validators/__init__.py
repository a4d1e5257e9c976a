"""Domain validators. Pure validation functions."""

from app.domain.validators.user_validator import (
    normalize_email,
    validate_password,
    validate_roles,
)

__all__ = [
    "normalize_email",
    "validate_password",
    "validate_roles",
]
