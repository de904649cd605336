from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from finance4all.auth import get_current_user
from finance4all.crud import crud_account
from finance4all.db.core import get_db, UserDB, AccountType
from finance4all.models import account as account_models

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
)


@router.post("", response_model=account_models.AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account: account_models.AccountCreate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Create a new account for the current user.
    """
    return crud_account.create_db_account(db=db, user_id=current_user.id, account_data=account)


@router.get("", response_model=List[account_models.AccountResponse])
def read_accounts(
    type: Optional[AccountType] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Retrieve the current user's accounts, optionally filtered by type or active flag.
    """
    return crud_account.read_db_accounts(db=db, user_id=current_user.id, account_type=type, is_active=is_active)


@router.get("/{account_id}", response_model=account_models.AccountResponse)
def read_account(
    account_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_account.read_db_account(db=db, account_id=account_id, user_id=current_user.id)


@router.put("/{account_id}", response_model=account_models.AccountResponse)
def update_account(
    account_id: UUID,
    account: account_models.AccountUpdate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_account.update_db_account(
        db=db, account_id=account_id, user_id=current_user.id, account_updates=account
    )


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Delete an account and all of its transactions.
    """
    crud_account.delete_db_account(db=db, account_id=account_id, user_id=current_user.id)
