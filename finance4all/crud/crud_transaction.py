from sqlalchemy.orm import Session, joinedload
from typing import Optional, List, Tuple, Iterable
from uuid import UUID

from finance4all.crud.base import read_owned, drop_nulls
from finance4all.db.core import TransactionDB, AccountDB, CategoryDB
from finance4all.errors import ApiError, ForbiddenError
from finance4all.logging_config import get_logger
from finance4all.models.transaction import TransactionCreate, TransactionUpdate, TransactionFilter, Pagination


logger = get_logger(__name__)


# ===== OWNERSHIP CHECKS =====

def _check_account(db: Session, user_id: UUID, account_id: UUID) -> AccountDB:
    """Transactions may only be booked against the caller's own accounts"""
    account = db.get(AccountDB, account_id)
    if account is None or account.user_id != user_id:
        raise ForbiddenError("Account not found or forbidden")
    return account


def _check_category(db: Session, user_id: UUID, category_id: Optional[UUID]) -> None:
    if category_id is not None:
        read_owned(db, CategoryDB, category_id, user_id, "Category")


def _build_transaction(db: Session, user_id: UUID, transaction_data: TransactionCreate) -> TransactionDB:
    _check_account(db, user_id, transaction_data.account_id)
    _check_category(db, user_id, transaction_data.category_id)
    return TransactionDB(user_id=user_id, **transaction_data.model_dump())


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: UUID, transaction_data: TransactionCreate) -> TransactionDB:
    db_transaction = _build_transaction(db, user_id, transaction_data)
    db.add(db_transaction)
    db.commit()
    db.refresh(db_transaction)
    return db_transaction


def bulk_create_db_transactions(db: Session, user_id: UUID,
                                transactions: Iterable[TransactionCreate]) -> List[TransactionDB]:
    """Create many transactions at once; if any of them is rejected none are stored"""
    try:
        db_transactions = [_build_transaction(db, user_id, data) for data in transactions]
        db.add_all(db_transactions)
        db.commit()
    except ApiError:
        db.rollback()
        raise

    for db_transaction in db_transactions:
        db.refresh(db_transaction)
    logger.info("Bulk created %d transactions for user %s", len(db_transactions), user_id)
    return db_transactions


def read_db_transaction(db: Session, transaction_id: UUID, user_id: UUID) -> TransactionDB:
    return read_owned(db, TransactionDB, transaction_id, user_id, "Transaction")


def read_db_transactions(db: Session, user_id: UUID, filters: Optional[TransactionFilter] = None,
                         pagination: Optional[Pagination] = None) -> Tuple[List[TransactionDB], int]:
    """Read transactions with filtering and pagination, newest first. Returns (page, total)"""
    pagination = pagination or Pagination()

    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)

    # Apply filters
    if filters:
        if filters.account_id:
            query = query.filter(TransactionDB.account_id == filters.account_id)

        if filters.category_id:
            query = query.filter(TransactionDB.category_id == filters.category_id)

        if filters.type:
            query = query.filter(TransactionDB.type == filters.type)

        if filters.start_date:
            query = query.filter(TransactionDB.transaction_date >= filters.start_date)

        if filters.end_date:
            query = query.filter(TransactionDB.transaction_date <= filters.end_date)

        if filters.min_amount is not None:
            query = query.filter(TransactionDB.amount >= filters.min_amount)

        if filters.max_amount is not None:
            query = query.filter(TransactionDB.amount <= filters.max_amount)

        if filters.description_search:
            query = query.filter(TransactionDB.description.ilike(f"%{filters.description_search}%"))

    total = query.count()
    page = query.options(joinedload(TransactionDB.category)).order_by(
        TransactionDB.transaction_date.desc(),
        TransactionDB.created_at.desc()
    ).offset(pagination.offset).limit(pagination.limit).all()

    return page, total


def update_db_transaction(db: Session, transaction_id: UUID, user_id: UUID,
                          transaction_updates: TransactionUpdate) -> TransactionDB:
    db_transaction = read_db_transaction(db, transaction_id, user_id)
    update_data = drop_nulls(transaction_updates.model_dump(exclude_unset=True),
                             ('account_id', 'amount', 'type', 'transaction_date', 'is_recurring'))

    if 'account_id' in update_data:
        _check_account(db, user_id, update_data['account_id'])
    if 'category_id' in update_data:
        _check_category(db, user_id, update_data['category_id'])

    for field, value in update_data.items():
        setattr(db_transaction, field, value)

    db.commit()
    db.refresh(db_transaction)
    return db_transaction


def delete_db_transaction(db: Session, transaction_id: UUID, user_id: UUID) -> bool:
    db_transaction = read_db_transaction(db, transaction_id, user_id)
    db.delete(db_transaction)
    db.commit()
    return True
