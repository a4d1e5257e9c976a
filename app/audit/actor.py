"""
Actor propagation: who performed a mutation, carried from the request boundary
to the point where the audit record is written.

Every mutation invocation gets its own handle. The three pathways carry the
actor differently (the saved instance's channel, the atomic update's
operation, the atomic delete's operation), so each has its own handle type;
they are only unified by read_actor() when the audit record is built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from app.audit.exceptions import InvalidHookTransitionError


@dataclass(frozen=True)
class ActorContext:
    """Snapshot of the acting user. Denormalized so old records stay accurate."""

    id: UUID
    display_name: str
    role: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "display_name": self.display_name, "role": self.role}


class MutationPathway(str, Enum):
    CREATE = "create"
    SAVE = "save"
    ATOMIC_UPDATE = "atomic_update"
    ATOMIC_DELETE = "atomic_delete"


@dataclass
class MutationHandle:
    """One pending mutation invocation. Not reusable once finished."""

    pathway: MutationPathway
    finished: bool = field(default=False, init=False)
    _actor: Optional[ActorContext] = field(default=None, init=False, repr=False)


@dataclass
class SaveHandle(MutationHandle):
    """Create or in-memory save of a single entity instance."""

    instance: Any = None


@dataclass
class UpdateHandle(MutationHandle):
    """Atomic conditional update: selection criteria plus update payload."""

    criteria: Mapping[str, Any] = field(default_factory=dict)
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class DeleteHandle(MutationHandle):
    """Atomic conditional delete: selection criteria only."""

    criteria: Mapping[str, Any] = field(default_factory=dict)


def attach_actor(handle: MutationHandle, actor: Optional[ActorContext]) -> None:
    """Associate actor with exactly this pending invocation."""
    if handle.finished:
        raise InvalidHookTransitionError(
            f"cannot attach actor to a finished {handle.pathway.value} mutation"
        )
    handle._actor = actor


def read_actor(handle: MutationHandle) -> Optional[ActorContext]:
    """Actor attached to the invocation, or None for system-initiated changes."""
    return handle._actor
