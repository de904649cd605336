from typing import Iterable, Type, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from finance4all.errors import NotFoundError, ForbiddenError


RowT = TypeVar("RowT")


def read_owned(db: Session, model: Type[RowT], row_id: UUID, user_id: UUID, label: str) -> RowT:
    """
    Load a row that must belong to ``user_id``.

    A missing row is NOT_FOUND; a row owned by someone else is FORBIDDEN.
    """
    row = db.get(model, row_id)
    if row is None:
        raise NotFoundError(f"{label} not found")
    if row.user_id != user_id:
        raise ForbiddenError()
    return row


def drop_nulls(update_data: dict, required_fields: Iterable[str]) -> dict:
    """Remove explicit nulls for columns that cannot be null, leaving those fields unchanged"""
    for field in required_fields:
        if field in update_data and update_data[field] is None:
            del update_data[field]
    return update_data
