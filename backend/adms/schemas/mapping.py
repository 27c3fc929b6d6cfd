"""Mapping between input schemas and SQLAlchemy models"""

from typing import Any, Iterable, List

from pydantic import BaseModel


def apply_update(instance: Any, update: BaseModel, exclude: Iterable[str] = ()) -> List[str]:
    """Copy the fields a caller actually set from ``update`` onto ``instance``.

    Unset and None fields are left alone, so partial updates never clear a
    column by accident.

    Returns:
        Names of the attributes whose value changed
    """
    excluded = set(exclude)
    changed = []
    for field, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
        if field in excluded:
            continue
        if getattr(instance, field) != value:
            setattr(instance, field, value)
            changed.append(field)
    return changed
