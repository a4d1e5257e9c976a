"""Validators for user domain rules. Pure functions, no infrastructure or DB access."""

import re
from typing import Iterable, List

from app.domain.exceptions import DomainValidationError, InvalidRoleError
from app.domain.models.user import VALID_ROLES

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def normalize_email(email: str) -> str:
    """Trim and lowercase; raise DomainValidationError if not a plausible address."""
    normalized = (email or "").strip().lower()
    if not normalized:
        raise DomainValidationError("Email and password are required")
    if not EMAIL_PATTERN.match(normalized):
        raise DomainValidationError("Please provide a valid email")
    return normalized


def validate_password(password: str) -> None:
    if not password:
        raise DomainValidationError("Email and password are required")


def validate_roles(roles: Iterable[str]) -> List[str]:
    """Return roles as a list; raise InvalidRoleError naming every unknown role."""
    roles = list(roles)
    invalid = [r for r in roles if r not in VALID_ROLES]
    if invalid:
        raise InvalidRoleError(f"Invalid roles: {', '.join(invalid)}")
    if not roles:
        raise DomainValidationError("Roles array is required")
    return roles
