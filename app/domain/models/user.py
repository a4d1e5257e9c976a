"""Domain model for users and roles."""

from enum import Enum
from typing import Iterable


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


VALID_ROLES = frozenset(r.value for r in Role)
DEFAULT_ROLES = [Role.USER.value]


def is_admin(roles: Iterable[str]) -> bool:
    return Role.ADMIN.value in roles


def primary_role(roles: Iterable[str]) -> str:
    """First role listed, or "user" when none are."""
    for role in roles:
        return role
    return Role.USER.value
