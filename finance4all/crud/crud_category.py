from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List
from uuid import UUID

from finance4all.crud.base import read_owned, drop_nulls
from finance4all.db.core import CategoryDB, CategoryType
from finance4all.errors import ConflictError, InputValidationError
from finance4all.models.category import CategoryCreate, CategoryUpdate


# ===== VALIDATION HELPERS =====

def _check_unique_name(db: Session, user_id: UUID, name: str, category_type: CategoryType,
                       exclude_id: Optional[UUID] = None) -> None:
    query = db.query(CategoryDB).filter(
        CategoryDB.user_id == user_id,
        CategoryDB.name == name,
        CategoryDB.type == category_type
    )
    if exclude_id is not None:
        query = query.filter(CategoryDB.id != exclude_id)
    if query.first():
        raise ConflictError(f"Category '{name}' already exists")


def _check_parent(db: Session, user_id: UUID, parent_id: Optional[UUID], category_id: Optional[UUID] = None) -> None:
    if parent_id is None:
        return
    if parent_id == category_id:
        raise InputValidationError([{"field": "parent_id", "message": "A category cannot be its own parent"}])
    parent = read_owned(db, CategoryDB, parent_id, user_id, "Parent category")

    # The new parent must not sit below the category being moved
    seen = set()
    while category_id is not None and parent is not None and parent.id not in seen:
        if parent.id == category_id:
            raise InputValidationError([{"field": "parent_id", "message": "Category hierarchy cannot contain cycles"}])
        seen.add(parent.id)
        parent = parent.parent


# ===== DATABASE OPERATIONS =====

def create_db_category(db: Session, user_id: UUID, category_data: CategoryCreate) -> CategoryDB:
    name = category_data.name.strip()
    _check_unique_name(db, user_id, name, category_data.type)
    _check_parent(db, user_id, category_data.parent_id)

    db_category = CategoryDB(
        user_id=user_id,
        name=name,
        type=category_data.type,
        color=category_data.color,
        icon=category_data.icon,
        parent_id=category_data.parent_id,
    )
    try:
        db.add(db_category)
        db.commit()
        db.refresh(db_category)
        return db_category
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Category '{name}' already exists")


def read_db_category(db: Session, category_id: UUID, user_id: UUID) -> CategoryDB:
    return read_owned(db, CategoryDB, category_id, user_id, "Category")


def read_db_categories(db: Session, user_id: UUID, category_type: Optional[CategoryType] = None) -> List[CategoryDB]:
    query = db.query(CategoryDB).filter(CategoryDB.user_id == user_id)
    if category_type is not None:
        query = query.filter(CategoryDB.type == category_type)
    return query.order_by(CategoryDB.type, CategoryDB.name).all()


def update_db_category(db: Session, category_id: UUID, user_id: UUID, category_updates: CategoryUpdate) -> CategoryDB:
    db_category = read_db_category(db, category_id, user_id)
    update_data = drop_nulls(category_updates.model_dump(exclude_unset=True), ('name', 'type'))

    if 'name' in update_data or 'type' in update_data:
        name = update_data.get('name', db_category.name).strip()
        update_data['name'] = name
        _check_unique_name(db, user_id, name, update_data.get('type', db_category.type), exclude_id=category_id)
    if 'parent_id' in update_data:
        _check_parent(db, user_id, update_data['parent_id'], category_id)

    for field, value in update_data.items():
        setattr(db_category, field, value)

    db.commit()
    db.refresh(db_category)
    return db_category


def delete_db_category(db: Session, category_id: UUID, user_id: UUID) -> bool:
    """Delete a category; its transactions become uncategorized and its budgets are removed"""
    db_category = read_db_category(db, category_id, user_id)
    db.delete(db_category)
    db.commit()
    return True
