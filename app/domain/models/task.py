"""Domain constants for tasks, the audited entity. Pure business semantics, no ORM or infrastructure."""

from typing import Dict, Tuple

TASK_ENTITY_TYPE = "Task"

# Declaration order is the order of field changes in every audit record.
AUDITED_FIELDS: Tuple[str, ...] = ("title", "description", "completed", "owner")

# Audited field name -> stored attribute name, where they differ.
AUDITED_ATTRIBUTES: Dict[str, str] = {"owner": "owner_id"}

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


def attribute_for(field_name: str) -> str:
    """Stored attribute backing an audited field."""
    return AUDITED_ATTRIBUTES.get(field_name, field_name)


def field_for(attribute_name: str) -> str:
    """Audited field name for a stored attribute (inverse of attribute_for)."""
    for field_name, attribute in AUDITED_ATTRIBUTES.items():
        if attribute == attribute_name:
            return field_name
    return attribute_name
