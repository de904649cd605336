from sqlalchemy.orm import Session, joinedload
from typing import List
from datetime import date
from uuid import UUID

from sqlalchemy import or_

from finance4all.crud.base import read_owned, drop_nulls
from finance4all.db.core import BudgetDB, CategoryDB
from finance4all.models.budget import BudgetCreate, BudgetUpdate
from finance4all.models.validation import validate_input


# ===== DATABASE OPERATIONS =====

def create_db_budget(db: Session, user_id: UUID, budget_data: BudgetCreate) -> BudgetDB:
    """Create a budget for one of the user's categories"""
    read_owned(db, CategoryDB, budget_data.category_id, user_id, "Category")

    db_budget = BudgetDB(user_id=user_id, **budget_data.model_dump())
    db.add(db_budget)
    db.commit()
    db.refresh(db_budget)
    return db_budget


def read_db_budget(db: Session, budget_id: UUID, user_id: UUID) -> BudgetDB:
    return read_owned(db, BudgetDB, budget_id, user_id, "Budget")


def read_db_budgets(db: Session, user_id: UUID, active_only: bool = False) -> List[BudgetDB]:
    """Read all budgets for a user, most recent start first"""
    query = db.query(BudgetDB).filter(BudgetDB.user_id == user_id)

    if active_only:
        current_date = date.today()
        query = query.filter(
            BudgetDB.is_active.is_(True),
            BudgetDB.start_date <= current_date,
            or_(BudgetDB.end_date.is_(None), BudgetDB.end_date >= current_date)
        )

    return query.options(joinedload(BudgetDB.category)).order_by(BudgetDB.start_date.desc()).all()


def update_db_budget(db: Session, budget_id: UUID, user_id: UUID, budget_updates: BudgetUpdate) -> BudgetDB:
    """Update a budget; the merged result must still be a valid budget"""
    db_budget = read_db_budget(db, budget_id, user_id)
    update_data = drop_nulls(budget_updates.model_dump(exclude_unset=True),
                             ('category_id', 'amount', 'period', 'start_date', 'is_active'))

    # Re-validate against the stored values so a lone start/end date change cannot invert the range
    validate_input(BudgetCreate, {
        "category_id": update_data.get("category_id", db_budget.category_id),
        "amount": update_data.get("amount", db_budget.amount),
        "period": update_data.get("period", db_budget.period),
        "start_date": update_data.get("start_date", db_budget.start_date),
        "end_date": update_data.get("end_date", db_budget.end_date),
    })

    if 'category_id' in update_data:
        read_owned(db, CategoryDB, update_data['category_id'], user_id, "Category")

    for field, value in update_data.items():
        setattr(db_budget, field, value)

    db.commit()
    db.refresh(db_budget)
    return db_budget


def delete_db_budget(db: Session, budget_id: UUID, user_id: UUID) -> bool:
    db_budget = read_db_budget(db, budget_id, user_id)
    db.delete(db_budget)
    db.commit()
    return True
