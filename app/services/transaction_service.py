import math
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session, joinedload

from app.common.exceptions import InvalidReferenceError, NotFoundError, ValidationError
from app.logger_config import logger
from app.models.category import CategoryType
from app.models.transaction import Transaction
from app.schemas.transaction import TransactionUpdate
from app.services.category_service import get_category_for_user
from app.utils.date_ranges import month_bounds
from app.utils.totals import income_expense_totals, split_by_type, to_minor_units

DEFAULT_PAGE_SIZE = 20
RECENT_TRANSACTIONS_LIMIT = 5


def _coerce_transaction_type(value) -> CategoryType:
    try:
        return CategoryType(value)
    except ValueError:
        raise ValidationError("Transaction type must be 'income' or 'expense'")


def _validated_amount(amount) -> int:
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be a positive number")
    try:
        rounded = to_minor_units(amount)
    except ValueError:
        raise ValidationError("Amount is out of range")
    if rounded < 1:
        raise ValidationError("Amount must be a positive number")
    return rounded


def _resolve_category(db: Session, user_id: str, category_id: Optional[str], transaction_type: CategoryType):
    """A transaction's category must belong to the user and carry the same type."""
    if not category_id:
        raise ValidationError("Category is required")
    category = get_category_for_user(db, user_id, category_id)
    if not category:
        raise InvalidReferenceError("Invalid category")
    if category.type != transaction_type:
        raise InvalidReferenceError(
            f"Category '{category.name}' is an {category.type.value} category "
            f"and cannot be used for an {transaction_type.value} transaction"
        )
    return category


def _filtered_query(
    db: Session,
    user_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    category_ids: Optional[Sequence[str]] = None,
):
    """Base query shared by listing and totals so both see the same rows."""
    query = db.query(Transaction).filter(Transaction.user_id == user_id)
    if start_date is not None:
        query = query.filter(Transaction.date >= start_date)
    if end_date is not None:
        query = query.filter(Transaction.date <= end_date)
    if category_ids:
        query = query.filter(Transaction.category_id.in_(list(category_ids)))
    return query


def get_transaction(db: Session, user_id: str, transaction_id: str) -> Transaction:
    """Get one of the user's transactions with its category loaded."""
    transaction = (
        db.query(Transaction)
        .options(joinedload(Transaction.category))
        .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .first()
    )
    if not transaction:
        raise NotFoundError("Transaction not found")
    return transaction


def create_transaction(
    db: Session,
    user_id: str,
    transaction_type,
    amount,
    category_id: str,
    date: Optional[datetime],
    description: Optional[str] = None,
) -> Transaction:
    """Record an income or expense entry. Amount is rounded to whole minor units."""
    rounded_amount = _validated_amount(amount)
    if date is None:
        raise ValidationError("Date is required")
    transaction_type = _coerce_transaction_type(transaction_type)
    _resolve_category(db, user_id, category_id, transaction_type)

    transaction = Transaction(
        user_id=user_id,
        type=transaction_type,
        amount=rounded_amount,
        description=description,
        category_id=category_id,
        date=date,
    )
    db.add(transaction)
    try:
        db.commit()
        db.refresh(transaction)
        logger.info(f"Transaction {transaction.id} created: {transaction_type.value} {rounded_amount} for {user_id}")
        return transaction
    except Exception:
        db.rollback()
        logger.exception("Error creating transaction")
        raise


def update_transaction(
    db: Session,
    user_id: str,
    transaction_id: str,
    patch: TransactionUpdate,
) -> Transaction:
    """Apply only the fields present in the patch; everything else stays untouched."""
    transaction = get_transaction(db, user_id, transaction_id)
    fields = patch.model_fields_set

    for required in ("type", "amount", "category_id", "date"):
        if required in fields and getattr(patch, required) is None:
            raise ValidationError(f"{required} cannot be empty")

    # validate everything before touching the row
    new_amount = _validated_amount(patch.amount) if "amount" in fields else transaction.amount
    new_type = _coerce_transaction_type(patch.type) if "type" in fields else transaction.type
    new_category_id = patch.category_id if "category_id" in fields else transaction.category_id
    if "type" in fields or "category_id" in fields:
        _resolve_category(db, user_id, new_category_id, new_type)

    transaction.amount = new_amount
    transaction.type = new_type
    transaction.category_id = new_category_id

    if "description" in fields:
        transaction.description = patch.description
    if "date" in fields:
        transaction.date = patch.date

    try:
        db.commit()
        db.refresh(transaction)
        logger.info(f"Transaction {transaction_id} updated ({', '.join(sorted(fields)) or 'no fields'})")
        return transaction
    except Exception:
        db.rollback()
        logger.exception(f"Error updating transaction {transaction_id}")
        raise


def delete_transaction(db: Session, user_id: str, transaction_id: str) -> None:
    """Hard delete. Receipts attached to the transaction are kept as orphans."""
    transaction = get_transaction(db, user_id, transaction_id)
    db.delete(transaction)
    try:
        db.commit()
        logger.info(f"Transaction {transaction_id} deleted by {user_id}")
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting transaction {transaction_id}")
        raise


def get_transactions(
    db: Session,
    user_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    category_ids: Optional[Sequence[str]] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Transaction], int, int]:
    """List transactions newest first. Returns (rows, total_count, total_pages)."""
    if page < 1 or limit < 1:
        raise ValidationError("Page and limit must be positive")

    query = _filtered_query(db, user_id, start_date, end_date, category_ids)
    total = query.count()

    rows = (
        query.options(joinedload(Transaction.category))
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    total_pages = math.ceil(total / limit)
    logger.debug(f"Retrieved {len(rows)} transactions out of {total} for {user_id}")
    return rows, total, total_pages


def get_transaction_totals(
    db: Session,
    user_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    category_ids: Optional[Sequence[str]] = None,
) -> dict:
    """Income, expense and net over every row matching the filters."""
    rows = (
        _filtered_query(db, user_id, start_date, end_date, category_ids)
        .with_entities(Transaction.type, Transaction.amount)
        .all()
    )
    return income_expense_totals(rows)


def get_dashboard_summary(db: Session, user_id: str, now: Optional[datetime] = None) -> dict:
    """Current calendar month totals plus the most recently dated transactions."""
    now = now or datetime.now()
    month_start, month_end = month_bounds(now.year, now.month)

    month_rows = (
        _filtered_query(db, user_id, month_start, month_end)
        .with_entities(Transaction.type, Transaction.amount)
        .all()
    )
    income, expenses = split_by_type(month_rows)

    recent = (
        db.query(Transaction)
        .options(joinedload(Transaction.category))
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .limit(RECENT_TRANSACTIONS_LIMIT)
        .all()
    )

    return {
        "current_month_income": income,
        "current_month_expenses": expenses,
        "net_balance": income - expenses,
        "recent_transactions": recent,
    }
