import os
import uuid
from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import Session

from app.common.exceptions import NotFoundError, ValidationError
from app.core.config import settings
from app.logger_config import logger
from app.models.receipt import Receipt
from app.services.transaction_service import get_transaction


ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "application/pdf"}

CONTENT_TYPES_BY_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".pdf": "application/pdf",
}

PUBLIC_PATH_PREFIX = "/uploads/"


def upload_dir() -> Path:
    return Path(settings.UPLOAD_DIR)


def validate_upload(content_type: Optional[str], size: int) -> None:
    """Boundary checks run before anything is written."""
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only JPG, PNG, and PDF files are allowed.")
    if size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb}MB.")


def content_type_for(filename: str) -> str:
    return CONTENT_TYPES_BY_EXTENSION.get(Path(filename).suffix.lower(), "application/octet-stream")


def stored_file_location(file_path: str) -> Path:
    """Map a stored '/uploads/<name>' reference to its location on disk."""
    return upload_dir() / Path(file_path).name


def _remove_file(location: Path) -> None:
    try:
        os.remove(location)
    except OSError as e:
        logger.warning(f"Could not remove receipt file {location}: {e}")


def get_receipt(db: Session, user_id: str, receipt_id: str) -> Receipt:
    receipt = db.query(Receipt).filter(
        Receipt.id == receipt_id,
        Receipt.user_id == user_id
    ).first()
    if not receipt:
        raise NotFoundError("Receipt not found")
    return receipt


def upload_receipt(
    db: Session,
    user_id: str,
    file_name: str,
    content: bytes,
    transaction_id: Optional[str] = None,
) -> Receipt:
    """
    Store an uploaded file under a generated name and record it.

    The file is written first; if the database insert fails the file is
    removed again so no row ever points at a missing upload.
    """
    if transaction_id:
        get_transaction(db, user_id, transaction_id)

    directory = upload_dir()
    directory.mkdir(parents=True, exist_ok=True)

    extension = Path(file_name or "").suffix.lower()
    unique_name = f"{uuid.uuid4()}{extension}"
    location = directory / unique_name
    location.write_bytes(content)

    receipt = Receipt(
        user_id=user_id,
        transaction_id=transaction_id or None,
        file_path=f"{PUBLIC_PATH_PREFIX}{unique_name}",
        file_name=file_name or unique_name,
    )
    db.add(receipt)
    try:
        db.commit()
        db.refresh(receipt)
    except Exception:
        db.rollback()
        _remove_file(location)
        logger.exception("Error saving receipt record")
        raise

    logger.info(f"Receipt {receipt.id} uploaded ({len(content)} bytes) for {user_id}")
    return receipt


def get_receipts_for_transaction(db: Session, user_id: str, transaction_id: str) -> List[Receipt]:
    """Receipts attached to one of the user's transactions, newest first."""
    get_transaction(db, user_id, transaction_id)
    return (
        db.query(Receipt)
        .filter(Receipt.transaction_id == transaction_id, Receipt.user_id == user_id)
        .order_by(Receipt.uploaded_at.desc())
        .all()
    )


def link_receipt_to_transaction(
    db: Session,
    user_id: str,
    receipt_id: str,
    transaction_id: str
) -> Receipt:
    receipt = get_receipt(db, user_id, receipt_id)
    get_transaction(db, user_id, transaction_id)

    receipt.transaction_id = transaction_id
    try:
        db.commit()
        db.refresh(receipt)
    except Exception:
        db.rollback()
        logger.exception(f"Error linking receipt {receipt_id}")
        raise

    logger.info(f"Receipt {receipt_id} linked to transaction {transaction_id}")
    return receipt


def delete_receipt(db: Session, user_id: str, receipt_id: str) -> None:
    """
    Remove the stored file (best effort) and the receipt row.
    A missing or undeletable file does not stop the row from being removed.
    """
    receipt = get_receipt(db, user_id, receipt_id)
    _remove_file(stored_file_location(receipt.file_path))

    db.delete(receipt)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting receipt {receipt_id}")
        raise

    logger.info(f"Receipt {receipt_id} deleted by {user_id}")


def get_receipt_file(db: Session, user_id: str, filename: str) -> Path:
    """
    Resolve a stored file name to a path on disk for one of the user's receipts.
    Names that do not belong to the user, or are missing on disk, are not found.
    """
    if not filename or Path(filename).name != filename:
        raise NotFoundError("File not found")

    receipt = db.query(Receipt).filter(
        Receipt.user_id == user_id,
        Receipt.file_path == f"{PUBLIC_PATH_PREFIX}{filename}"
    ).first()
    if not receipt:
        raise NotFoundError("File not found")

    location = upload_dir() / filename
    if not location.is_file():
        raise NotFoundError("File not found")
    return location
