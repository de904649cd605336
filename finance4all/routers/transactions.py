from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID

from finance4all.auth import get_current_user
from finance4all.crud import crud_transaction
from finance4all.db.core import get_db, UserDB, TransactionType
from finance4all.models import transaction as transaction_models
from finance4all.models.validation import validate_input

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)


@router.post("", response_model=transaction_models.TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: transaction_models.TransactionCreate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Record a transaction against one of the current user's accounts.
    """
    return crud_transaction.create_db_transaction(db=db, user_id=current_user.id, transaction_data=transaction)


@router.post("/bulk", response_model=List[transaction_models.TransactionResponse], status_code=status.HTTP_201_CREATED)
def bulk_create_transactions(
    payload: transaction_models.TransactionBulkCreate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Record several transactions in one request. Either all are stored or none.
    """
    return crud_transaction.bulk_create_db_transactions(
        db=db, user_id=current_user.id, transactions=payload.transactions
    )


@router.get("", response_model=transaction_models.TransactionPage)
def read_transactions(
    account_id: Optional[UUID] = None,
    category_id: Optional[UUID] = None,
    type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    description_search: Optional[str] = None,
    offset: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Retrieve transactions with filtering and pagination, newest first.
    """
    filters = validate_input(transaction_models.TransactionFilter, {
        "account_id": account_id,
        "category_id": category_id,
        "type": type,
        "start_date": start_date,
        "end_date": end_date,
        "min_amount": min_amount,
        "max_amount": max_amount,
        "description_search": description_search,
    })
    pagination = validate_input(transaction_models.Pagination, {"offset": offset, "limit": limit})

    transactions, total = crud_transaction.read_db_transactions(
        db=db, user_id=current_user.id, filters=filters, pagination=pagination
    )
    return transaction_models.TransactionPage(
        transactions=[transaction_models.TransactionResponse.model_validate(t) for t in transactions],
        total=total,
        has_more=pagination.offset + len(transactions) < total,
    )


@router.get("/{transaction_id}", response_model=transaction_models.TransactionResponse)
def read_transaction(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_transaction.read_db_transaction(db=db, transaction_id=transaction_id, user_id=current_user.id)


@router.put("/{transaction_id}", response_model=transaction_models.TransactionResponse)
def update_transaction(
    transaction_id: UUID,
    transaction: transaction_models.TransactionUpdate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_transaction.update_db_transaction(
        db=db, transaction_id=transaction_id, user_id=current_user.id, transaction_updates=transaction
    )


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    crud_transaction.delete_db_transaction(db=db, transaction_id=transaction_id, user_id=current_user.id)
