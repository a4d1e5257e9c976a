"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from app.domain.exceptions import DomainError, DomainValidationError, InvalidRoleError
from app.domain.models import AUDITED_FIELDS, TASK_ENTITY_TYPE, Role

__all__ = [
    "AUDITED_FIELDS",
    "DomainError",
    "DomainValidationError",
    "InvalidRoleError",
    "Role",
    "TASK_ENTITY_TYPE",
]
