from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List
from uuid import UUID

from finance4all.db.core import UserDB, CategoryDB, CategoryType, UserRole
from finance4all.errors import UserAlreadyExistsError
from finance4all.logging_config import get_logger
from finance4all.models.user import UserCreate, UserUpdate


logger = get_logger(__name__)


# Every new user starts with these categories (name, color, icon)
DEFAULT_EXPENSE_CATEGORIES = [
    ("Housing", "#1A73E8", "home"),
    ("Transportation", "#34A853", "car"),
    ("Food & Dining", "#FBBC04", "restaurant"),
    ("Utilities", "#EA4335", "bolt"),
    ("Healthcare", "#A142F4", "medical"),
    ("Entertainment", "#FF6B6B", "movie"),
    ("Shopping", "#4ECDC4", "shopping"),
    ("Personal Care", "#95E1D3", "spa"),
    ("Education", "#F38181", "school"),
    ("Miscellaneous", "#AA96DA", "more"),
]

DEFAULT_INCOME_CATEGORIES = [
    ("Salary", "#34A853", "payments"),
    ("Freelance", "#1A73E8", "work"),
    ("Investments", "#FBBC04", "trending_up"),
    ("Other Income", "#A142F4", "attach_money"),
]


def default_categories(user_id: UUID) -> List[CategoryDB]:
    categories = []
    for category_type, defaults in ((CategoryType.EXPENSE, DEFAULT_EXPENSE_CATEGORIES),
                                    (CategoryType.INCOME, DEFAULT_INCOME_CATEGORIES)):
        for name, color, icon in defaults:
            categories.append(CategoryDB(
                user_id=user_id, name=name, type=category_type, color=color, icon=icon, is_default=True
            ))
    return categories


# ===== DATABASE OPERATIONS =====

def create_db_user(db: Session, firebase_uid: str, user_data: UserCreate,
                   role: UserRole = UserRole.USER) -> UserDB:
    """Register the caller and seed their default categories"""

    if read_db_user_by_firebase_uid(db, firebase_uid) is not None:
        raise UserAlreadyExistsError()

    if db.query(UserDB).filter(UserDB.email == user_data.email).first():
        raise UserAlreadyExistsError("Email already registered")

    db_user = UserDB(
        firebase_uid=firebase_uid,
        email=user_data.email,
        display_name=user_data.display_name,
        photo_url=user_data.photo_url,
        date_of_birth=user_data.date_of_birth,
        role=role,
    )

    try:
        db.add(db_user)
        db.flush()  # Get the user id without committing
        db.add_all(default_categories(db_user.id))
        db.commit()
        db.refresh(db_user)
    except IntegrityError:
        db.rollback()
        raise UserAlreadyExistsError()

    logger.info("Registered user %s", db_user.id)
    return db_user


def read_db_user(db: Session, user_id: UUID) -> Optional[UserDB]:
    return db.get(UserDB, user_id)


def read_db_user_by_firebase_uid(db: Session, firebase_uid: str) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.firebase_uid == firebase_uid).first()


def read_db_users(db: Session, skip: int = 0, limit: int = 100) -> List[UserDB]:
    """Read all users, newest first"""
    return db.query(UserDB).order_by(UserDB.created_at.desc()).offset(skip).limit(limit).all()


def update_db_user(db: Session, db_user: UserDB, user_updates: UserUpdate) -> UserDB:
    update_data = user_updates.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_user, field, value)

    db.commit()
    db.refresh(db_user)
    return db_user


def delete_db_user(db: Session, db_user: UserDB) -> bool:
    """Delete a user; accounts, transactions, categories, budgets and projections go with it"""
    user_id = db_user.id
    db.delete(db_user)
    db.commit()
    logger.info("Deleted user %s and all owned data", user_id)
    return True
