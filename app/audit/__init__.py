"""Audit trail for task mutations: diff engine, actor propagation, interception hooks. No FastAPI."""

from app.audit.actor import ActorContext, MutationPathway, attach_actor, read_actor
from app.audit.diff import ABSENT, DiffMode, compute_changes
from app.audit.models import AuditRecord, ChangeKind, FieldChange

__all__ = [
    "ABSENT",
    "ActorContext",
    "AuditRecord",
    "ChangeKind",
    "DiffMode",
    "FieldChange",
    "MutationPathway",
    "attach_actor",
    "compute_changes",
    "read_actor",
]
