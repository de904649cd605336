import enum
from datetime import datetime, date, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from fastapi import Request
from sqlalchemy import create_engine, event, ForeignKey, Index, UniqueConstraint, Boolean, String, DECIMAL, DateTime, Date
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column

from finance4all.logging_config import get_logger


logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


# ===== ENUMS =====

class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class AccountType(str, enum.Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    INVESTMENT = "INVESTMENT"
    CREDIT_CARD = "CREDIT_CARD"
    LOAN = "LOAN"
    MORTGAGE = "MORTGAGE"
    OTHER_ASSET = "OTHER_ASSET"
    OTHER_LIABILITY = "OTHER_LIABILITY"


class AccountCategory(str, enum.Enum):
    ASSET = "ASSET"
    INVESTMENT = "INVESTMENT"
    DEBT = "DEBT"
    LIABILITY = "LIABILITY"


ACCOUNT_CATEGORY_BY_TYPE = {
    AccountType.CHECKING: AccountCategory.ASSET,
    AccountType.SAVINGS: AccountCategory.ASSET,
    AccountType.OTHER_ASSET: AccountCategory.ASSET,
    AccountType.INVESTMENT: AccountCategory.INVESTMENT,
    AccountType.CREDIT_CARD: AccountCategory.DEBT,
    AccountType.LOAN: AccountCategory.DEBT,
    AccountType.MORTGAGE: AccountCategory.LIABILITY,
    AccountType.OTHER_LIABILITY: AccountCategory.LIABILITY,
}


def account_category(account_type: AccountType) -> AccountCategory:
    return ACCOUNT_CATEGORY_BY_TYPE[AccountType(account_type)]


class CategoryType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class BudgetPeriod(str, enum.Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ExpenseGrowth(str, enum.Enum):
    INFLATION = "INFLATION"  # expenses compound by the inflation rate
    FLAT = "FLAT"            # expenses stay at the baseline


# ===== TABLES =====

class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("firebase_uid", name="uq_user_firebase_uid"),
        UniqueConstraint("email", name="uq_user_email"),
        Index("idx_users_email", "email"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    firebase_uid: Mapped[str] = mapped_column(String(128), nullable=False)

    # Profile
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(100))
    photo_url: Mapped[Optional[str]] = mapped_column(String(500))
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.USER)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships; deleting a user removes everything they own
    accounts = relationship("AccountDB", back_populates="user", cascade="all, delete-orphan")
    categories = relationship("CategoryDB", back_populates="user", cascade="all, delete-orphan")
    transactions = relationship("TransactionDB", back_populates="user", cascade="all, delete-orphan")
    budgets = relationship("BudgetDB", back_populates="user", cascade="all, delete-orphan")
    projections = relationship("ProjectionDB", back_populates="user", cascade="all, delete-orphan")


class AccountDB(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_accounts_user", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))

    # Account Details
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[AccountType] = mapped_column(Enum(AccountType), nullable=False)
    subtype: Mapped[Optional[str]] = mapped_column(String(50))
    institution: Mapped[Optional[str]] = mapped_column(String(100))
    account_number: Mapped[Optional[str]] = mapped_column(String(20))

    # Balance; debts and liabilities are usually stored negative
    balance: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0.00"))
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    interest_rate: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(7, 4))  # percent, e.g. 18.99
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="accounts")
    transactions = relationship("TransactionDB", back_populates="account", cascade="all, delete-orphan")

    @property
    def category(self) -> AccountCategory:
        return account_category(self.type)


class CategoryDB(Base):
    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint("user_id", "name", "type", name="uq_user_category_name_type"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    parent_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("categories.id", ondelete="SET NULL"))

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[CategoryType] = mapped_column(Enum(CategoryType), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(7))  # Hex color code
    icon: Mapped[Optional[str]] = mapped_column(String(50))
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="categories")
    parent = relationship("CategoryDB", remote_side=[id], back_populates="children")
    children = relationship("CategoryDB", back_populates="parent")
    transactions = relationship("TransactionDB", back_populates="category")
    budgets = relationship("BudgetDB", back_populates="category", cascade="all, delete-orphan")


class TransactionDB(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
        Index("idx_transactions_user_account", "user_id", "account_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    account_id: Mapped[UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    category_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("categories.id", ondelete="SET NULL"))

    # Always positive; the direction comes from the type
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)

    description: Mapped[Optional[str]] = mapped_column(String(200))
    notes: Mapped[Optional[str]] = mapped_column(String(500))
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    recurring_id: Mapped[Optional[UUID]] = mapped_column()

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="transactions")
    account = relationship("AccountDB", back_populates="transactions")
    category = relationship("CategoryDB", back_populates="transactions")


class BudgetDB(Base):
    __tablename__ = "budgets"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    category_id: Mapped[UUID] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"))

    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    period: Mapped[BudgetPeriod] = mapped_column(Enum(BudgetPeriod), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="budgets")
    category = relationship("CategoryDB", back_populates="budgets")


class ProjectionDB(Base):
    __tablename__ = "projections"

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_user_projection_name"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))

    # Assumptions, stored as percentages (7.0 means 7%)
    income_growth_rate: Mapped[Decimal] = mapped_column(DECIMAL(7, 3), nullable=False)
    investment_return: Mapped[Decimal] = mapped_column(DECIMAL(7, 3), nullable=False)
    inflation_rate: Mapped[Decimal] = mapped_column(DECIMAL(7, 3), nullable=False)
    expense_growth: Mapped[ExpenseGrowth] = mapped_column(Enum(ExpenseGrowth), default=ExpenseGrowth.INFLATION)
    expected_salary: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(15, 2))
    expected_expenses: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(15, 2))
    years: Mapped[int] = mapped_column(default=30)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="projections")


# ===== ENGINE / SESSIONS =====

class Database:
    """
    Owns the engine and session factory for one process. Built by the app
    factory and disposed on shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine = create_engine(url, echo=echo, connect_args=connect_args)
        self.session_local = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        if url.startswith("sqlite"):
            @event.listens_for(self.engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.db.session_local()
    try:
        yield db
    finally:
        db.close()
