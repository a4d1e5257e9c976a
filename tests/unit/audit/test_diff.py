"""Diff engine tests: per-mode field selection, strict inequality, set directive, ordering."""

import copy
from uuid import uuid4

import pytest

from app.audit.diff import (
    ABSENT,
    DELETE_SENTINEL,
    SET_DIRECTIVE,
    DiffMode,
    compute_changes,
    resolve_new_value,
    strictly_differs,
)
from app.audit.models import FieldChange

FIELDS = ("title", "description", "completed", "owner")


def _names(changes):
    return [c.field_name for c in changes]


# --- CREATE ----------------------------------------------------------------


def test_create_lists_present_fields_from_none():
    owner = uuid4()
    after = {"title": "Buy milk", "description": "", "completed": False, "owner": owner}
    changes = compute_changes(FIELDS, None, after, DiffMode.CREATE)
    assert changes == [
        FieldChange("title", None, "Buy milk"),
        FieldChange("description", None, ""),
        FieldChange("completed", None, False),
        FieldChange("owner", None, owner),
    ]


def test_create_skips_absent_but_keeps_none():
    changes = compute_changes(FIELDS, None, {"title": "a", "description": None}, DiffMode.CREATE)
    assert changes == [FieldChange("title", None, "a"), FieldChange("description", None, None)]


def test_create_with_no_audited_fields_is_empty():
    assert compute_changes(FIELDS, None, {"unrelated": 1}, DiffMode.CREATE) == []


# --- SAVE ------------------------------------------------------------------


def test_save_covers_exactly_modified_fields_in_declaration_order():
    before = {"title": "a", "completed": False}
    after = {"title": "b", "description": "d", "completed": True, "owner": uuid4()}
    changes = compute_changes(
        FIELDS, before, after, DiffMode.SAVE, modified={"completed", "title"}
    )
    assert changes == [
        FieldChange("title", "a", "b"),
        FieldChange("completed", False, True),
    ]


def test_save_absent_prior_value_reported_as_none():
    changes = compute_changes(FIELDS, {}, {"description": "d"}, DiffMode.SAVE, modified={"description"})
    assert changes == [FieldChange("description", None, "d")]


def test_save_nothing_modified_is_empty():
    assert compute_changes(FIELDS, {"title": "a"}, {"title": "b"}, DiffMode.SAVE) == []


# --- ATOMIC ----------------------------------------------------------------


def test_atomic_top_level_payload():
    changes = compute_changes(
        FIELDS,
        {"title": "a", "completed": False},
        {"title": "a", "completed": True},
        DiffMode.ATOMIC,
        update={"completed": True},
    )
    assert changes == [FieldChange("completed", False, True)]


def test_atomic_set_directive_takes_precedence():
    changes = compute_changes(
        FIELDS,
        {"title": "a"},
        {"title": "c"},
        DiffMode.ATOMIC,
        update={"title": "b", SET_DIRECTIVE: {"title": "c"}},
    )
    assert changes == [FieldChange("title", "a", "c")]


def test_atomic_unchanged_value_not_recorded():
    changes = compute_changes(
        FIELDS,
        {"title": "same", "completed": True},
        {"title": "same", "completed": True},
        DiffMode.ATOMIC,
        update={"title": "same", "completed": True},
    )
    assert changes == []


def test_atomic_falls_back_to_post_update_value():
    """Fields absent from the payload are compared against the post-update document."""
    changes = compute_changes(
        FIELDS,
        {"title": "a", "description": "old"},
        {"title": "a", "description": "new"},
        DiffMode.ATOMIC,
        update={"title": "a"},
    )
    assert changes == [FieldChange("description", "old", "new")]


def test_atomic_bool_and_int_are_different_types():
    changes = compute_changes(
        FIELDS, {"completed": 0}, {"completed": False}, DiffMode.ATOMIC, update={"completed": False}
    )
    assert changes == [FieldChange("completed", 0, False)]


def test_atomic_none_against_absent_counts_as_change():
    changes = compute_changes(
        FIELDS, {}, {"description": None}, DiffMode.ATOMIC, update={"description": None}
    )
    assert changes == [FieldChange("description", None, None)]


def test_atomic_field_absent_everywhere_is_skipped():
    assert compute_changes(FIELDS, {"title": "a"}, {}, DiffMode.ATOMIC, update={}) == []
    assert compute_changes(FIELDS, {}, {}, DiffMode.ATOMIC, update={}) == []


# --- DELETE ----------------------------------------------------------------


def test_delete_is_single_status_sentinel():
    changes = compute_changes(FIELDS, {"title": "a", "completed": True}, None, DiffMode.DELETE)
    assert changes == [DELETE_SENTINEL]
    assert DELETE_SENTINEL == FieldChange("status", "active", "deleted")


def test_delete_without_snapshot_still_sentinel():
    assert compute_changes(FIELDS, None, None, DiffMode.DELETE) == [DELETE_SENTINEL]


# --- helpers ---------------------------------------------------------------


def test_inputs_are_not_mutated():
    before = {"title": "a", "completed": False}
    after = {"title": "b", "completed": True}
    update = {SET_DIRECTIVE: {"title": "b"}, "completed": True}
    snapshot = copy.deepcopy((before, after, update))
    compute_changes(FIELDS, before, after, DiffMode.ATOMIC, update=update)
    assert (before, after, update) == snapshot


def test_resolve_new_value_absent_when_nowhere():
    assert resolve_new_value("title", {}, {}) is ABSENT


@pytest.mark.parametrize(
    "old,new,expected",
    [
        (False, False, False),
        (False, True, True),
        (0, False, True),
        (1, 1.0, True),
        ("a", "a", False),
        (None, None, False),
        (ABSENT, None, True),
    ],
)
def test_strictly_differs(old, new, expected):
    assert strictly_differs(old, new) is expected


def test_unknown_mode_raises():
    with pytest.raises(ValueError):
        compute_changes(FIELDS, {}, {}, "bogus")
