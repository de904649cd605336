from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from finance4all.auth import get_current_user
from finance4all.crud import crud_budget
from finance4all.db.core import get_db, UserDB
from finance4all.models import budget as budget_models
from finance4all.services import calculations

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


@router.post("", response_model=budget_models.BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: budget_models.BudgetCreate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Create a new budget for one of the current user's categories.
    """
    return crud_budget.create_db_budget(db=db, user_id=current_user.id, budget_data=budget)


@router.get("", response_model=List[budget_models.BudgetResponse])
def read_budgets(
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Retrieve all budgets for the current user.
    """
    return crud_budget.read_db_budgets(db=db, user_id=current_user.id, active_only=active_only)


@router.get("/{budget_id}", response_model=budget_models.BudgetResponse)
def read_budget(
    budget_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_budget.read_db_budget(db=db, budget_id=budget_id, user_id=current_user.id)


@router.get("/{budget_id}/progress", response_model=budget_models.BudgetProgress)
def read_budget_progress(
    budget_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Spending so far against the budget.
    """
    db_budget = crud_budget.read_db_budget(db=db, budget_id=budget_id, user_id=current_user.id)
    return calculations.calculate_budget_progress(db, db_budget)


@router.put("/{budget_id}", response_model=budget_models.BudgetResponse)
def update_budget(
    budget_id: UUID,
    budget: budget_models.BudgetUpdate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_budget.update_db_budget(db=db, budget_id=budget_id, user_id=current_user.id, budget_updates=budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    crud_budget.delete_db_budget(db=db, budget_id=budget_id, user_id=current_user.id)
