from app.core.database import Base, SessionLocal, engine
from app import models  # noqa: F401
from app.models.category import CategoryType
from app.models.invoice import InvoiceStatus
from app.services.category_service import get_categories
from app.services.invoice_service import create_invoice, update_invoice_status
from app.services.transaction_service import create_transaction
from app.services.user_service import get_user_by_email, register_user

from faker import Faker
import random
from datetime import datetime, timedelta

fake = Faker()

DEMO_PASSWORD = "password123"
DEMO_USERS = [
    ("sarah@example.com", "Sarah Chen"),
    ("james@example.com", "James Wilson"),
    ("emily@example.com", "Emily Rodriguez"),
]
MONTHS_OF_HISTORY = 6

if engine.dialect.name == "sqlite":
    Base.metadata.create_all(bind=engine)

db = SessionLocal()

try:
    for email, name in DEMO_USERS:
        if get_user_by_email(db, email):
            print(f"⏭️  {email} already exists, skipping")
            continue

        print(f"🔄 Creating {name}...")
        user = register_user(db, email, DEMO_PASSWORD, DEMO_PASSWORD, name)
        income_categories = get_categories(db, user.id, CategoryType.income)
        expense_categories = get_categories(db, user.id, CategoryType.expense)

        now = datetime.now()
        transactions = 0
        for months_back in range(MONTHS_OF_HISTORY):
            month_day = now - timedelta(days=30 * months_back)

            # one paycheck plus a handful of expenses per month
            salary = next(c for c in income_categories if c.name == "Salary")
            create_transaction(
                db, user.id, CategoryType.income,
                amount=random.randint(400000, 650000),
                category_id=salary.id,
                date=month_day.replace(day=1, hour=9, minute=0, second=0, microsecond=0),
                description="Monthly salary",
            )
            transactions += 1

            for _ in range(random.randint(5, 12)):
                category = random.choice(expense_categories)
                create_transaction(
                    db, user.id, CategoryType.expense,
                    amount=random.randint(500, 60000),
                    category_id=category.id,
                    date=month_day.replace(day=random.randint(1, 28)),
                    description=fake.sentence(nb_words=4).rstrip("."),
                )
                transactions += 1
        print(f"✅ Seeded {transactions} transactions")

        invoices = 0
        for _ in range(random.randint(2, 5)):
            issue_date = (now - timedelta(days=random.randint(0, 120))).date()
            invoice = create_invoice(
                db, user.id,
                client_name=fake.company(),
                client_email=fake.company_email(),
                issue_date=issue_date,
                due_date=issue_date + timedelta(days=30),
                notes=fake.sentence() if random.choice([True, False]) else None,
                items=[
                    {
                        "description": fake.bs().capitalize(),
                        "quantity": random.randint(1, 10),
                        "unit_price": random.randint(2500, 20000),
                    }
                    for _ in range(random.randint(1, 4))
                ],
            )
            # walk some invoices forward through the lifecycle
            for next_status in (InvoiceStatus.sent, InvoiceStatus.paid)[:random.randint(0, 2)]:
                update_invoice_status(db, user.id, invoice.id, next_status)
            invoices += 1
        print(f"✅ Seeded {invoices} invoices")

    print(f"🎉 All data seeded successfully! Log in with any demo email and '{DEMO_PASSWORD}'")

except Exception as e:
    db.rollback()
    print(f"❌ SEEDING FAILED: {e}")
finally:
    db.close()
