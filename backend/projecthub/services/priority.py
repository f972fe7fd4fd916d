"""
Task priority translation.

Priorities are stored and returned as ``low | medium | high``. Some clients
still send the older 1-5 numeric scale; this module is the only place
that converts between the two.
"""

from typing import Any

from projecthub.models.enums import TaskPriority

_NUMERIC_TO_LABEL = {
    1: TaskPriority.LOW.value,
    2: TaskPriority.LOW.value,
    3: TaskPriority.MEDIUM.value,
    4: TaskPriority.HIGH.value,
    5: TaskPriority.HIGH.value,
}

_LABEL_TO_NUMERIC = {
    TaskPriority.LOW.value: 1,
    TaskPriority.MEDIUM.value: 3,
    TaskPriority.HIGH.value: 5,
}


def normalize_priority(value: Any) -> Any:
    """
    Convert a numeric priority (or numeric string) to its label.

    Labels pass through lower-cased; anything unrecognised is returned
    unchanged so schema validation reports it.
    """
    if isinstance(value, TaskPriority):
        return value.value
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return _NUMERIC_TO_LABEL.get(value, value)
    if isinstance(value, str):
        stripped = value.strip().lower()
        if stripped.isdigit():
            return _NUMERIC_TO_LABEL.get(int(stripped), value)
        return stripped
    return value


def priority_to_numeric(label: str) -> int:
    """Numeric weight of a priority label (low=1, medium=3, high=5)."""
    return _LABEL_TO_NUMERIC[normalize_priority(label)]
