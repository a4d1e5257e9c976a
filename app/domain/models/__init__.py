"""Domain models. Pure business entities."""

from app.domain.models.task import (
    AUDITED_FIELDS,
    TASK_ENTITY_TYPE,
    attribute_for,
    field_for,
)
from app.domain.models.user import DEFAULT_ROLES, VALID_ROLES, Role, is_admin, primary_role

__all__ = [
    "AUDITED_FIELDS",
    "DEFAULT_ROLES",
    "Role",
    "TASK_ENTITY_TYPE",
    "VALID_ROLES",
    "attribute_for",
    "field_for",
    "is_admin",
    "primary_role",
]
