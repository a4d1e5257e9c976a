"""
Field-level diff engine. Pure functions: no I/O, inputs are never mutated.

Entity state is passed as mappings keyed by audited field name. A key missing
from a mapping means the field is absent, which is not the same as None.
"""

from enum import Enum
from typing import Any, Collection, List, Mapping, Optional, Sequence

from app.audit.models import FieldChange

SET_DIRECTIVE = "$set"

DELETE_SENTINEL = FieldChange(field_name="status", from_value="active", to_value="deleted")


class _Absent:
    """Marker for a field with no value at all."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class DiffMode(str, Enum):
    CREATE = "create"
    SAVE = "save"
    ATOMIC = "atomic"
    DELETE = "delete"


def compute_changes(
    audited_fields: Sequence[str],
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
    mode: DiffMode,
    *,
    modified: Collection[str] = (),
    update: Optional[Mapping[str, Any]] = None,
) -> List[FieldChange]:
    """
    Ordered field changes between before and after. Output follows the
    declaration order of audited_fields, except DELETE which is one sentinel.

    SAVE needs `modified` (fields the entity framework marked as touched).
    ATOMIC needs `update` (the update payload as sent to the store).
    """
    if mode is DiffMode.CREATE:
        return _create_changes(audited_fields, after or {})
    if mode is DiffMode.SAVE:
        return _saved_changes(audited_fields, before or {}, after or {}, modified)
    if mode is DiffMode.ATOMIC:
        return _atomic_changes(audited_fields, before or {}, after or {}, update or {})
    if mode is DiffMode.DELETE:
        return [DELETE_SENTINEL]
    raise ValueError(f"unknown diff mode: {mode!r}")


def _create_changes(fields: Sequence[str], after: Mapping[str, Any]) -> List[FieldChange]:
    changes = []
    for name in fields:
        value = after.get(name, ABSENT)
        if value is not ABSENT:
            changes.append(FieldChange(field_name=name, from_value=None, to_value=value))
    return changes


def _saved_changes(
    fields: Sequence[str],
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    modified: Collection[str],
) -> List[FieldChange]:
    # Only what the mutation touched counts; a post-hoc comparison is not consulted.
    changes = []
    for name in fields:
        if name in modified:
            changes.append(
                FieldChange(
                    field_name=name,
                    from_value=_present_or_none(before.get(name, ABSENT)),
                    to_value=_present_or_none(after.get(name, ABSENT)),
                )
            )
    return changes


def _atomic_changes(
    fields: Sequence[str],
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    update: Mapping[str, Any],
) -> List[FieldChange]:
    changes = []
    for name in fields:
        old = before.get(name, ABSENT)
        new = resolve_new_value(name, update, after)
        if new is not ABSENT and strictly_differs(old, new):
            changes.append(
                FieldChange(field_name=name, from_value=_present_or_none(old), to_value=new)
            )
    return changes


def resolve_new_value(name: str, update: Mapping[str, Any], after: Mapping[str, Any]) -> Any:
    """Set directive value, else top-level payload value, else post-update value."""
    directive = update.get(SET_DIRECTIVE)
    if isinstance(directive, Mapping) and name in directive:
        return directive[name]
    if name in update:
        return update[name]
    return after.get(name, ABSENT)


def strictly_differs(old: Any, new: Any) -> bool:
    """
    Inequality by type and value, so False vs 0 differ while False vs False
    do not. None against ABSENT counts as a change.
    """
    if type(old) is not type(new):
        return True
    return old != new


def _present_or_none(value: Any) -> Any:
    return None if value is ABSENT else value
