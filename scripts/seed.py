import argparse
import random
from datetime import date, timedelta
from decimal import Decimal
from dateutil.relativedelta import relativedelta
from faker import Faker
from sqlalchemy.orm import Session

from finance4all.config import get_settings
from finance4all.crud import crud_account, crud_transaction, crud_user
from finance4all.db.core import Database, CategoryDB, CategoryType
from finance4all.logging_config import setup_logging, get_logger
from finance4all.models.account import AccountCreate
from finance4all.models.transaction import TransactionCreate
from finance4all.models.user import UserCreate
from finance4all.models.validation import validate_input


logger = get_logger("finance4all.seed")

fake = Faker()

DEMO_FIREBASE_UID = "demo-user-uid"

DEMO_ACCOUNTS = [
    {"name": "Main Checking", "type": "CHECKING", "balance": "5000.00", "institution": "Chase"},
    {"name": "Emergency Fund", "type": "SAVINGS", "balance": "15000.00", "institution": "Ally Bank",
     "interest_rate": "4.25"},
    {"name": "Brokerage", "type": "INVESTMENT", "balance": "42000.00", "institution": "Fidelity"},
    {"name": "Credit Card", "type": "CREDIT_CARD", "balance": "-2500.00", "institution": "American Express",
     "interest_rate": "18.99"},
]


def seed_database(db: Session, months: int = 6) -> None:
    """
    Create a demo user with default categories, a few accounts and
    monthly salary plus random expenses for the last ``months`` months.
    """
    if crud_user.read_db_user_by_firebase_uid(db, DEMO_FIREBASE_UID):
        logger.info("Demo user already exists. Exiting.")
        return

    user = crud_user.create_db_user(
        db, DEMO_FIREBASE_UID,
        validate_input(UserCreate, {"email": "demo@finance4all.app", "display_name": "Demo User"})
    )

    accounts = [
        crud_account.create_db_account(db, user.id, validate_input(AccountCreate, data))
        for data in DEMO_ACCOUNTS
    ]
    checking = accounts[0]

    categories = db.query(CategoryDB).filter(CategoryDB.user_id == user.id).all()
    salary = next(c for c in categories if c.name == "Salary")
    expense_categories = [c for c in categories if c.type == CategoryType.EXPENSE]

    transactions = []
    today = date.today()
    for month in range(months):
        payday = today.replace(day=1) - relativedelta(months=month)
        transactions.append(TransactionCreate(
            account_id=checking.id, category_id=salary.id, amount=Decimal("5000.00"),
            type="INCOME", description="Monthly salary", transaction_date=payday,
        ))
        for _ in range(random.randint(8, 15)):
            category = random.choice(expense_categories)
            transactions.append(TransactionCreate(
                account_id=random.choice([checking.id, accounts[3].id]),
                category_id=category.id,
                amount=Decimal(random.randint(500, 25000)) / 100,
                type="EXPENSE",
                description=fake.company()[:200],
                transaction_date=payday + timedelta(days=random.randint(0, 27)),
            ))

    crud_transaction.bulk_create_db_transactions(db, user.id, transactions)
    logger.info("Seeded demo user %s with %d accounts and %d transactions",
                user.id, len(accounts), len(transactions))


def main():
    parser = argparse.ArgumentParser(description="Seed the Finance4All database with demo data")
    parser.add_argument("--months", type=int, default=6, help="Months of transaction history to generate")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(app_log_level=settings.APP_LOG_LEVEL)

    database = Database(settings.DATABASE_URL)
    database.create_all()
    db = database.session_local()
    try:
        seed_database(db, months=args.months)
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    main()
