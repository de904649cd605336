from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID

from finance4all.crud.base import read_owned, drop_nulls
from finance4all.db.core import AccountDB, AccountType
from finance4all.logging_config import get_logger
from finance4all.models.account import AccountCreate, AccountUpdate


logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_account(db: Session, user_id: UUID, account_data: AccountCreate) -> AccountDB:
    """Create a new account for the user"""
    db_account = AccountDB(
        user_id=user_id,
        **account_data.model_dump()
    )
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    logger.info("Created %s account %s for user %s", db_account.type.value, db_account.id, user_id)
    return db_account


def read_db_account(db: Session, account_id: UUID, user_id: UUID) -> AccountDB:
    return read_owned(db, AccountDB, account_id, user_id, "Account")


def read_db_accounts(db: Session, user_id: UUID, account_type: Optional[AccountType] = None,
                     is_active: Optional[bool] = None) -> List[AccountDB]:
    """Read the user's accounts, newest first"""
    query = db.query(AccountDB).filter(AccountDB.user_id == user_id)

    if account_type is not None:
        query = query.filter(AccountDB.type == account_type)
    if is_active is not None:
        query = query.filter(AccountDB.is_active.is_(is_active))

    return query.order_by(AccountDB.created_at.desc()).all()


def update_db_account(db: Session, account_id: UUID, user_id: UUID, account_updates: AccountUpdate) -> AccountDB:
    db_account = read_db_account(db, account_id, user_id)

    update_data = drop_nulls(account_updates.model_dump(exclude_unset=True),
                             ('name', 'type', 'balance', 'currency', 'is_active'))
    for field, value in update_data.items():
        setattr(db_account, field, value)

    db.commit()
    db.refresh(db_account)
    return db_account


def delete_db_account(db: Session, account_id: UUID, user_id: UUID) -> bool:
    """Delete an account together with its transactions"""
    db_account = read_db_account(db, account_id, user_id)
    db.delete(db_account)
    db.commit()
    return True
