import re

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
from app.common.exceptions import DuplicateError, ValidationError
from app.models.user import User
from app.core.security import get_password_hash, verify_password
from app.services.category_service import seed_default_categories
from app.logger_config import logger


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    """Get user by database ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email (case-insensitive, emails are stored lower-cased)."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def validate_registration(email: str, password: str, confirm_password: str, name: str) -> None:
    if not email or not password or not confirm_password or not (name or "").strip():
        raise ValidationError("All fields are required")

    if not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email format")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if password != confirm_password:
        raise ValidationError("Passwords do not match")


def register_user(
    db: Session,
    email: str,
    password: str,
    confirm_password: str,
    name: str
) -> User:
    """
    Register a new user and seed their default categories.

    The user row and the category batch are committed together; if either
    insert fails nothing is written.
    """
    validate_registration(email, password, confirm_password, name)

    normalized_email = email.strip().lower()
    if get_user_by_email(db, normalized_email):
        raise DuplicateError("An account with this email already exists")

    user = User(
        email=normalized_email,
        password_hash=get_password_hash(password),
        name=name.strip()
    )
    db.add(user)

    try:
        db.flush()  # Flush to get user.id
        seed_default_categories(db, user.id)
        db.commit()
        db.refresh(user)
        logger.info(f"User {user.email} registered with default categories")
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error registering user: {str(e)}")
        raise DuplicateError("An account with this email already exists")


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user
