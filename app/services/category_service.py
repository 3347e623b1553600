from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List

from app.common.exceptions import (
    DuplicateError,
    ImmutableError,
    InUseError,
    NotFoundError,
    ValidationError,
)
from app.models.category import Category, CategoryType
from app.models.transaction import Transaction
from app.logger_config import logger


DEFAULT_INCOME_CATEGORIES = [
    "Salary",
    "Freelance",
    "Investments",
    "Other Income",
]

DEFAULT_EXPENSE_CATEGORIES = [
    "Rent",
    "Utilities",
    "Food",
    "Transportation",
    "Entertainment",
    "Healthcare",
    "Other Expense",
]


def _coerce_category_type(value) -> CategoryType:
    try:
        return CategoryType(value)
    except ValueError:
        raise ValidationError("Category type must be 'income' or 'expense'")


def seed_default_categories(db: Session, user_id: str) -> List[Category]:
    """
    Add the default categories for a new user to the session.
    The caller commits, so the batch lands together with whatever else
    the caller is writing (the user row at registration).
    """
    categories = [
        Category(user_id=user_id, name=name, type=CategoryType.income, is_default=True)
        for name in DEFAULT_INCOME_CATEGORIES
    ] + [
        Category(user_id=user_id, name=name, type=CategoryType.expense, is_default=True)
        for name in DEFAULT_EXPENSE_CATEGORIES
    ]
    db.add_all(categories)
    return categories


def get_category_for_user(db: Session, user_id: str, category_id: str) -> Optional[Category]:
    """Get a category by ID, only if it belongs to the user."""
    return db.query(Category).filter(
        Category.id == category_id,
        Category.user_id == user_id
    ).first()


def get_category_by_name(
    db: Session,
    user_id: str,
    name: str,
    category_type: CategoryType
) -> Optional[Category]:
    """Get a user's category by exact name within one type."""
    return db.query(Category).filter(
        Category.user_id == user_id,
        Category.name == name,
        Category.type == category_type
    ).first()


def get_categories(
    db: Session,
    user_id: str,
    category_type: Optional[CategoryType] = None
) -> List[Category]:
    """Get the user's categories ordered by type, then name."""
    query = db.query(Category).filter(Category.user_id == user_id)
    if category_type is not None:
        query = query.filter(Category.type == _coerce_category_type(category_type))
    return query.order_by(Category.type.asc(), Category.name.asc()).all()


def create_category(db: Session, user_id: str, name: str, category_type) -> Category:
    """Create a custom (non-default) category."""
    trimmed_name = (name or "").strip()
    if not trimmed_name:
        raise ValidationError("Category name is required")
    category_type = _coerce_category_type(category_type)

    if get_category_by_name(db, user_id, trimmed_name, category_type):
        raise DuplicateError("A category with this name already exists")

    category = Category(
        user_id=user_id,
        name=trimmed_name,
        type=category_type,
        is_default=False
    )
    db.add(category)

    try:
        db.commit()
        db.refresh(category)
        logger.info(f"Category {category.id} ({trimmed_name}/{category_type.value}) created for {user_id}")
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating category: {str(e)}")
        raise DuplicateError("A category with this name already exists")


def rename_category(db: Session, user_id: str, category_id: str, name: str) -> Category:
    """Rename a custom category. Defaults are immutable."""
    category = get_category_for_user(db, user_id, category_id)
    if not category:
        raise NotFoundError("Category not found")

    if category.is_default:
        raise ImmutableError("Cannot edit default categories")

    trimmed_name = (name or "").strip()
    if not trimmed_name:
        raise ValidationError("Category name is required")

    existing = get_category_by_name(db, user_id, trimmed_name, category.type)
    if existing and existing.id != category.id:
        raise DuplicateError("A category with this name already exists")

    category.name = trimmed_name

    try:
        db.commit()
        db.refresh(category)
        logger.info(f"Category {category_id} renamed to {trimmed_name}")
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error renaming category: {str(e)}")
        raise DuplicateError("A category with this name already exists")


def count_category_transactions(db: Session, category_id: str) -> int:
    return db.query(func.count(Transaction.id)).filter(
        Transaction.category_id == category_id
    ).scalar() or 0


def delete_category(db: Session, user_id: str, category_id: str) -> None:
    """Delete a custom category that no transaction references."""
    category = get_category_for_user(db, user_id, category_id)
    if not category:
        raise NotFoundError("Category not found")

    if category.is_default:
        raise ImmutableError("Cannot delete default categories")

    transaction_count = count_category_transactions(db, category_id)
    if transaction_count > 0:
        noun = "transaction uses" if transaction_count == 1 else "transactions use"
        raise InUseError(f"Cannot delete category: {transaction_count} {noun} this category")

    db.delete(category)
    try:
        db.commit()
        logger.info(f"Category {category_id} deleted by {user_id}")
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting category {category_id}")
        raise
