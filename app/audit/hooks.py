"""
Mutation interception for the audited task store.

Each repository method runs one explicit hook chain:

    IDLE -> BEFORE_CAPTURED -> PRIMARY_MUTATION_APPLIED -> AUDIT_ATTEMPTED -> IDLE

BEFORE_CAPTURED is skipped for create and in-memory save. The audit write in
the after-phase is best effort: its failure is reported, never raised, and
never undoes the primary mutation. A failing primary mutation raises to the
caller and no record is written.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Protocol, Set, Tuple
from uuid import UUID

from app.audit.actor import (
    ActorContext,
    DeleteHandle,
    MutationHandle,
    MutationPathway,
    SaveHandle,
    UpdateHandle,
    attach_actor,
    read_actor,
)
from app.audit.diff import SET_DIRECTIVE, DiffMode, compute_changes
from app.audit.exceptions import InvalidHookTransitionError
from app.audit.models import AuditRecord, ChangeKind
from app.audit.recorder import AuditRecorder
from app.domain.models.task import AUDITED_FIELDS, TASK_ENTITY_TYPE, attribute_for, field_for

logger = logging.getLogger(__name__)


class HookPhase(str, Enum):
    IDLE = "idle"
    BEFORE_CAPTURED = "before_captured"
    PRIMARY_MUTATION_APPLIED = "primary_mutation_applied"
    AUDIT_ATTEMPTED = "audit_attempted"


_PHASE_TRANSITIONS: Dict[HookPhase, FrozenSet[HookPhase]] = {
    HookPhase.IDLE: frozenset({HookPhase.BEFORE_CAPTURED, HookPhase.PRIMARY_MUTATION_APPLIED}),
    HookPhase.BEFORE_CAPTURED: frozenset({HookPhase.PRIMARY_MUTATION_APPLIED}),
    HookPhase.PRIMARY_MUTATION_APPLIED: frozenset({HookPhase.AUDIT_ATTEMPTED}),
    HookPhase.AUDIT_ATTEMPTED: frozenset({HookPhase.IDLE}),
}


class HookChain:
    """Phase tracker for one mutation invocation. Never re-entered or retried."""

    def __init__(self, handle: MutationHandle) -> None:
        self.handle = handle
        self.phase = HookPhase.IDLE
        self.history: List[HookPhase] = [HookPhase.IDLE]

    def advance(self, new_phase: HookPhase) -> None:
        allowed = _PHASE_TRANSITIONS.get(self.phase, frozenset())
        if new_phase not in allowed:
            raise InvalidHookTransitionError(
                f"Invalid hook transition from {self.phase.value} to {new_phase.value}"
            )
        self.phase = new_phase
        self.history.append(new_phase)

    def close(self) -> None:
        """Back to IDLE whether or not the chain completed; the handle is spent."""
        if self.phase is HookPhase.AUDIT_ATTEMPTED:
            self.advance(HookPhase.IDLE)
        elif self.phase is not HookPhase.IDLE:
            # Aborted by a failing primary mutation.
            self.phase = HookPhase.IDLE
            self.history.append(HookPhase.IDLE)
        self.handle.finished = True


class TaskStore(Protocol):
    """Raw task persistence. Implemented by SqlTaskStore."""

    async def find_one(self, criteria: Mapping[str, Any]) -> Any: ...

    async def snapshot_one(self, criteria: Mapping[str, Any]) -> Optional[Dict[str, Any]]: ...

    async def list_tasks(self, owner_id: Optional[UUID] = None) -> List[Any]: ...

    async def ids_where(self, criteria: Mapping[str, Any]) -> List[UUID]: ...

    def row_values(self, row: Any) -> Dict[str, Any]: ...

    def pending_changes(self, row: Any) -> Tuple[Set[str], Dict[str, Any]]: ...

    async def insert(self, row: Any) -> Any: ...

    async def save(self, row: Any) -> Any: ...

    async def update_one(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> Any: ...

    async def delete_one(self, criteria: Mapping[str, Any]) -> Optional[UUID]: ...


def audited_view(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Column-keyed values -> audited-field-keyed values. Absent columns stay absent."""
    view = {}
    for name in AUDITED_FIELDS:
        attribute = attribute_for(name)
        if attribute in values:
            view[name] = values[attribute]
    return view


def audited_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Update payload with column names translated to audited field names, set directive included."""
    translated: Dict[str, Any] = {}
    for key, value in payload.items():
        if key == SET_DIRECTIVE and isinstance(value, Mapping):
            translated[SET_DIRECTIVE] = {field_for(k): v for k, v in value.items()}
        else:
            translated[field_for(key)] = value
    return translated


def flatten_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Column values to write: top-level fields, overridden by the set directive."""
    values = {k: v for k, v in payload.items() if k != SET_DIRECTIVE}
    directive = payload.get(SET_DIRECTIVE)
    if isinstance(directive, Mapping):
        values.update(directive)
    return values


class AuditedTaskRepository:
    """
    Task repository whose mutations are audited. Every mutating method takes
    the acting user explicitly; actor=None records a system change.
    """

    def __init__(
        self,
        store: TaskStore,
        recorder: AuditRecorder,
        *,
        enabled: bool = True,
        entity_type: str = TASK_ENTITY_TYPE,
    ) -> None:
        self._store = store
        self._recorder = recorder
        self._enabled = enabled
        self._entity_type = entity_type

    # --- reads (not audited) ----------------------------------------------

    async def get(self, task_id: UUID) -> Any:
        return await self._store.find_one({"id": task_id})

    async def list_tasks(self, owner_id: Optional[UUID] = None) -> List[Any]:
        return await self._store.list_tasks(owner_id)

    # --- create ------------------------------------------------------------

    async def create(self, task: Any, *, actor: Optional[ActorContext] = None) -> Any:
        """Insert a new task; always audited, even with no audited fields set."""
        handle = SaveHandle(pathway=MutationPathway.CREATE, instance=task)
        attach_actor(handle, actor)
        chain = HookChain(handle)
        try:
            saved = await self._store.insert(task)
            chain.advance(HookPhase.PRIMARY_MUTATION_APPLIED)

            def build() -> Optional[Dict[str, Any]]:
                # A NULL column on a fresh row was never set.
                values = {k: v for k, v in self._store.row_values(saved).items() if v is not None}
                after = audited_view(values)
                changes = compute_changes(AUDITED_FIELDS, None, after, DiffMode.CREATE)
                return self._record_args(handle, saved.id, ChangeKind.CREATE, changes)

            await self._after(chain, build, entity_id=saved.id)
            return saved
        finally:
            chain.close()

    # --- in-memory mutate-then-save ---------------------------------------

    async def save(self, task: Any, *, actor: Optional[ActorContext] = None) -> Any:
        """Persist attribute changes made on a loaded task; audited only if an audited field was touched."""
        handle = SaveHandle(pathway=MutationPathway.SAVE, instance=task)
        attach_actor(handle, actor)
        chain = HookChain(handle)
        try:
            # Modification tracking belongs to the ORM; read it before commit resets it.
            modified, before = self._store.pending_changes(task)
            saved = await self._store.save(task)
            chain.advance(HookPhase.PRIMARY_MUTATION_APPLIED)

            def build() -> Optional[Dict[str, Any]]:
                changes = compute_changes(
                    AUDITED_FIELDS,
                    audited_view(before),
                    audited_view(self._store.row_values(saved)),
                    DiffMode.SAVE,
                    modified={field_for(name) for name in modified},
                )
                if not changes:
                    return None
                return self._record_args(handle, saved.id, ChangeKind.UPDATE, changes)

            await self._after(chain, build, entity_id=saved.id)
            return saved
        finally:
            chain.close()

    # --- atomic conditional update ----------------------------------------

    async def update_where(
        self,
        criteria: Mapping[str, Any],
        payload: Mapping[str, Any],
        *,
        actor: Optional[ActorContext] = None,
    ) -> Any:
        """
        Find the first task matching criteria and apply payload in one statement.
        Returns the updated task, or None if nothing matched.
        """
        handle = UpdateHandle(
            pathway=MutationPathway.ATOMIC_UPDATE, criteria=dict(criteria), payload=dict(payload)
        )
        attach_actor(handle, actor)
        chain = HookChain(handle)
        try:
            snapshot = await self._capture(handle.criteria, handle)
            chain.advance(HookPhase.BEFORE_CAPTURED)

            updated = await self._store.update_one(handle.criteria, flatten_payload(handle.payload))
            chain.advance(HookPhase.PRIMARY_MUTATION_APPLIED)

            def build() -> Optional[Dict[str, Any]]:
                if updated is None or snapshot is None:
                    return None
                changes = compute_changes(
                    AUDITED_FIELDS,
                    audited_view(snapshot),
                    audited_view(self._store.row_values(updated)),
                    DiffMode.ATOMIC,
                    update=audited_payload(handle.payload),
                )
                if not changes:
                    return None
                return self._record_args(handle, updated.id, ChangeKind.UPDATE, changes)

            await self._after(chain, build, entity_id=getattr(updated, "id", None))
            return updated
        finally:
            chain.close()

    # --- atomic conditional delete ----------------------------------------

    async def delete_where(
        self,
        criteria: Mapping[str, Any],
        *,
        actor: Optional[ActorContext] = None,
    ) -> bool:
        """Delete the first task matching criteria. Returns False if nothing matched."""
        handle = DeleteHandle(pathway=MutationPathway.ATOMIC_DELETE, criteria=dict(criteria))
        attach_actor(handle, actor)
        chain = HookChain(handle)
        try:
            snapshot = await self._capture(handle.criteria, handle)
            chain.advance(HookPhase.BEFORE_CAPTURED)

            deleted_id = await self._store.delete_one(handle.criteria)
            chain.advance(HookPhase.PRIMARY_MUTATION_APPLIED)

            def build() -> Optional[Dict[str, Any]]:
                # A snapshot with no deleted row means a concurrent delete won the race
                # and recorded the removal itself.
                if deleted_id is None:
                    return None
                entity_id = (snapshot or {}).get("id") or deleted_id
                changes = compute_changes(AUDITED_FIELDS, snapshot, None, DiffMode.DELETE)
                return self._record_args(handle, entity_id, ChangeKind.DELETE, changes)

            await self._after(chain, build, entity_id=deleted_id)
            return deleted_id is not None
        finally:
            chain.close()

    async def delete_owned_by(
        self, owner_id: UUID, *, actor: Optional[ActorContext] = None
    ) -> int:
        """Delete every task of one owner, each through the audited delete pathway."""
        deleted = 0
        for task_id in await self._store.ids_where({"owner_id": owner_id}):
            if await self.delete_where({"id": task_id}, actor=actor):
                deleted += 1
        return deleted

    # --- phases ------------------------------------------------------------

    async def _capture(
        self, criteria: Mapping[str, Any], handle: MutationHandle
    ) -> Optional[Dict[str, Any]]:
        """Before-phase fetch with the mutation's own criteria. Failure means no snapshot."""
        try:
            return await self._store.snapshot_one(criteria)
        except Exception as e:
            logger.warning(
                "audit_snapshot_unavailable",
                extra={"pathway": handle.pathway.value, "error": str(e)},
            )
            return None

    async def _after(
        self,
        chain: HookChain,
        build: Callable[[], Optional[Dict[str, Any]]],
        *,
        entity_id: Optional[UUID],
    ) -> Optional[AuditRecord]:
        chain.advance(HookPhase.AUDIT_ATTEMPTED)
        if not self._enabled:
            return None
        return await self._recorder.record_safely(
            build,
            context={
                "event": "audit_write_failed",
                "entity_type": self._entity_type,
                "entity_id": str(entity_id) if entity_id is not None else None,
                "pathway": chain.handle.pathway.value,
            },
        )

    def _record_args(
        self,
        handle: MutationHandle,
        entity_id: UUID,
        change_kind: ChangeKind,
        changes: list,
    ) -> Dict[str, Any]:
        return {
            "entity_type": self._entity_type,
            "entity_id": entity_id,
            "change_kind": change_kind,
            "field_changes": changes,
            "actor": read_actor(handle),
        }
