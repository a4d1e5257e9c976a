"""Immutable audit record model. Domain-level immutability."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
from uuid import UUID

from app.audit.actor import ActorContext

# Closed set of value types an audited field can hold.
AuditValue = Union[str, bool, int, float, UUID, None]


class ChangeKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class FieldChange:
    field_name: str
    from_value: AuditValue
    to_value: AuditValue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field_name": self.field_name,
            "from_value": to_wire(self.from_value),
            "to_value": to_wire(self.to_value),
        }


@dataclass(frozen=True)
class AuditRecord:
    """
    Immutable audit record: which entity, what changed, who changed it, when (UTC).
    The actor is a snapshot taken at write time, not a live reference.
    """

    entity_type: str
    entity_id: UUID
    change_kind: ChangeKind
    field_changes: Tuple[FieldChange, ...]
    actor: Optional[ActorContext]
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Structured, JSON-compatible representation (the stored wire shape)."""
        return {
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id),
            "change_kind": self.change_kind.value,
            "field_changes": [c.to_dict() for c in self.field_changes],
            "actor": self.actor.to_dict() if self.actor else None,
            "occurred_at": self.occurred_at.isoformat(),
        }


def to_wire(value: AuditValue) -> Union[str, bool, int, float, None]:
    """Render an audit value as JSON: identity references become strings."""
    if isinstance(value, UUID):
        return str(value)
    return value
