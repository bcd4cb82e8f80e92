"""Helpers for lists of status conditions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass
class Condition:
    """A status condition of a resource."""

    type: str
    status: str = ""
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None
    last_updated_time: datetime | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _add_or_update(
    conditions: list[Condition], new_condition: Condition, update_last_updated: bool
) -> tuple[list[Condition], bool]:
    now = _now()
    new_condition = replace(new_condition, last_transition_time=now)
    if update_last_updated:
        new_condition = replace(new_condition, last_updated_time=now)

    for position, current in enumerate(conditions):
        if current.type != new_condition.type:
            continue
        unchanged = (current.status, current.reason, current.message) == (
            new_condition.status,
            new_condition.reason,
            new_condition.message,
        )
        if not update_last_updated and unchanged:
            return conditions, False
        if new_condition.status == current.status:
            new_condition = replace(
                new_condition, last_transition_time=current.last_transition_time
            )
        result = list(conditions)
        result[position] = new_condition
        return result, True
    return [*conditions, new_condition], True


def _add_or_update_all(
    conditions: Iterable[Condition] | None,
    new_conditions: Iterable[Condition],
    update_last_updated: bool,
) -> tuple[list[Condition], bool]:
    result = list(conditions or ())
    any_updated = False
    for new_condition in new_conditions:
        result, updated = _add_or_update(result, new_condition, update_last_updated)
        any_updated = any_updated or updated
    return result, any_updated


def add_or_update_status_conditions(
    conditions: Iterable[Condition] | None, *new_conditions: Condition
) -> tuple[list[Condition], bool]:
    """Add the new conditions or replace those of the same type.

    Returns the resulting list and whether anything changed.
    """
    return _add_or_update_all(conditions, new_conditions, False)


def add_or_update_status_conditions_with_last_updated_timestamp(
    conditions: Iterable[Condition] | None, *new_conditions: Condition
) -> list[Condition]:
    """Like add_or_update_status_conditions, always refreshing the last updated time."""
    result, _ = _add_or_update_all(conditions, new_conditions, True)
    return result


def add_status_conditions(
    conditions: Iterable[Condition] | None, *new_conditions: Condition
) -> list[Condition]:
    """Append the conditions without checking for duplicate types."""
    now = _now()
    return [
        *(conditions or ()),
        *(
            cond if cond.last_transition_time is not None
            else replace(cond, last_transition_time=now)
            for cond in new_conditions
        ),
    ]


def find_condition_by_type(
    conditions: Iterable[Condition], condition_type: str
) -> Condition | None:
    """Return the first condition of the given type, or None."""
    return next((c for c in conditions if c.type == condition_type), None)


def is_true(conditions: Sequence[Condition], condition_type: str) -> bool:
    found = find_condition_by_type(conditions, condition_type)
    return found is not None and found.status == ConditionStatus.TRUE


def is_false(conditions: Sequence[Condition], condition_type: str) -> bool:
    found = find_condition_by_type(conditions, condition_type)
    return found is not None and found.status == ConditionStatus.FALSE


def is_not_true(conditions: Sequence[Condition], condition_type: str) -> bool:
    found = find_condition_by_type(conditions, condition_type)
    return found is None or found.status != ConditionStatus.TRUE


def is_false_with_reason(
    conditions: Sequence[Condition], condition_type: str, reason: str
) -> bool:
    found = find_condition_by_type(conditions, condition_type)
    return (
        found is not None
        and found.status == ConditionStatus.FALSE
        and found.reason == reason
    )


def is_true_with_reason(
    conditions: Sequence[Condition], condition_type: str, reason: str
) -> bool:
    found = find_condition_by_type(conditions, condition_type)
    return (
        found is not None
        and found.status == ConditionStatus.TRUE
        and found.reason == reason
    )


def count(
    conditions: Iterable[Condition], condition_type: str, status: str, reason: str
) -> int:
    """Count the conditions matching the type, status and reason."""
    return sum(
        1
        for c in conditions
        if c.type == condition_type and c.status == status and c.reason == reason
    )


def has_condition_reason(
    conditions: Sequence[Condition], condition_type: str, reason: str
) -> bool:
    """True when the first condition of the type has the given reason."""
    found = find_condition_by_type(conditions, condition_type)
    return found is not None and found.reason == reason