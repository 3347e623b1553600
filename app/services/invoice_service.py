# app/services/invoice_service.py

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.common.exceptions import (
    ImmutableStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.logger_config import logger
from app.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from app.schemas.invoice import InvoiceUpdate
from app.utils.totals import invoice_total, to_minor_units


# draft -> sent -> paid; cancelled is only reachable through void_invoice
VALID_TRANSITIONS: Dict[InvoiceStatus, set] = {
    InvoiceStatus.draft: {InvoiceStatus.sent},
    InvoiceStatus.sent: {InvoiceStatus.paid},
    InvoiceStatus.paid: set(),
    InvoiceStatus.cancelled: set(),
}

VOIDABLE_STATUSES = {InvoiceStatus.sent, InvoiceStatus.paid}

INVOICE_NUMBER_PREFIX = "INV-"


# ==================== HELPER FUNCTIONS ====================

def format_invoice_number(sequence: int) -> str:
    return f"{INVOICE_NUMBER_PREFIX}{sequence:03d}"


def generate_invoice_number(db: Session, user_id: str) -> str:
    """
    Next invoice number for the user: existing invoice count + 1.
    If that number is already taken (a draft was deleted earlier), keep counting up.
    """
    count = db.query(func.count(Invoice.id)).filter(Invoice.user_id == user_id).scalar() or 0
    taken = {
        number for (number,) in
        db.query(Invoice.invoice_number).filter(Invoice.user_id == user_id).all()
    }
    sequence = count + 1
    while format_invoice_number(sequence) in taken:
        sequence += 1
    return format_invoice_number(sequence)


def _item_field(item, name: str):
    return item.get(name) if isinstance(item, dict) else getattr(item, name, None)


def _normalize_items(items) -> List[dict]:
    """
    Validate line items and round quantity/unit price to integers.
    Accepts dicts or objects with description/quantity/unit_price.
    """
    if not items:
        raise ValidationError("At least one line item is required")

    normalized = []
    for item in items:
        description = (_item_field(item, "description") or "").strip()
        quantity = _item_field(item, "quantity")
        unit_price = _item_field(item, "unit_price")

        if not description:
            raise ValidationError("All line items must have a description")
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if unit_price is None or unit_price < 0:
            raise ValidationError("Unit price cannot be negative")

        try:
            rounded_quantity = to_minor_units(quantity)
            rounded_price = to_minor_units(unit_price)
        except ValueError:
            raise ValidationError("Quantity and unit price must be within range")
        if rounded_quantity < 1:
            raise ValidationError("Quantity must be greater than 0")

        normalized.append({
            "description": description,
            "quantity": rounded_quantity,
            "unit_price": rounded_price,
        })
    return normalized


def _build_items(normalized: List[dict]) -> List[InvoiceItem]:
    return [
        InvoiceItem(position=index, **item)
        for index, item in enumerate(normalized)
    ]


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _commit(db: Session, invoice: Invoice, action: str) -> Invoice:
    try:
        db.commit()
        db.refresh(invoice)
        return invoice
    except Exception:
        db.rollback()
        logger.exception(f"Error during invoice {action}")
        raise


# ==================== INVOICE QUERIES ====================

def get_invoice(db: Session, user_id: str, invoice_id: str) -> Invoice:
    """Get one of the user's invoices with its items."""
    invoice = (
        db.query(Invoice)
        .options(selectinload(Invoice.items))
        .filter(Invoice.id == invoice_id, Invoice.user_id == user_id)
        .first()
    )
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


def get_invoices(db: Session, user_id: str) -> List[dict]:
    """
    All of the user's invoices, newest issue date first, each with its total.
    Totals come from a (quantity, unit_price) projection rather than full item rows.
    """
    invoices = (
        db.query(Invoice)
        .filter(Invoice.user_id == user_id)
        .order_by(Invoice.issue_date.desc(), Invoice.created_at.desc())
        .all()
    )

    items_by_invoice = defaultdict(list)
    if invoices:
        projection = (
            db.query(InvoiceItem.invoice_id, InvoiceItem.quantity, InvoiceItem.unit_price)
            .filter(InvoiceItem.invoice_id.in_([inv.id for inv in invoices]))
            .all()
        )
        for row in projection:
            items_by_invoice[row.invoice_id].append(row)

    return [
        {
            "id": inv.id,
            "invoice_number": inv.invoice_number,
            "client_name": inv.client_name,
            "status": inv.status,
            "issue_date": inv.issue_date,
            "due_date": inv.due_date,
            "total": invoice_total(items_by_invoice[inv.id]),
        }
        for inv in invoices
    ]


# ==================== MUTATIONS ====================

def create_invoice(
    db: Session,
    user_id: str,
    client_name: str,
    issue_date: Optional[date],
    due_date: Optional[date],
    items: list,
    client_email: Optional[str] = None,
    notes: Optional[str] = None,
) -> Invoice:
    """
    Create a draft invoice together with its line items.

    The invoice row and all of its items are committed in one transaction.
    """
    if not client_name or not client_name.strip():
        raise ValidationError("Client name is required")
    if not issue_date:
        raise ValidationError("Issue date is required")
    if not due_date:
        raise ValidationError("Due date is required")
    normalized = _normalize_items(items)

    invoice_number = generate_invoice_number(db, user_id)
    invoice = Invoice(
        user_id=user_id,
        invoice_number=invoice_number,
        client_name=client_name.strip(),
        client_email=_optional_text(client_email),
        status=InvoiceStatus.draft,
        issue_date=issue_date,
        due_date=due_date,
        notes=_optional_text(notes),
        items=_build_items(normalized),
    )
    db.add(invoice)
    _commit(db, invoice, "creation")
    logger.info(f"Invoice {invoice_number} ({invoice.id}) created for {user_id} with {len(normalized)} items")
    return invoice


def update_invoice(db: Session, user_id: str, invoice_id: str, patch: InvoiceUpdate) -> Invoice:
    """
    Edit a draft invoice.

    When the patch carries items, the old items are deleted and the new ones
    inserted in the same commit as the field changes.
    """
    invoice = get_invoice(db, user_id, invoice_id)
    if invoice.status != InvoiceStatus.draft:
        raise ImmutableStateError("Only draft invoices can be edited")

    fields = patch.model_fields_set

    if "client_name" in fields and (patch.client_name is None or not patch.client_name.strip()):
        raise ValidationError("Client name is required")
    for required in ("issue_date", "due_date"):
        if required in fields and getattr(patch, required) is None:
            raise ValidationError(f"{required.replace('_', ' ').capitalize()} is required")

    normalized = None
    if "items" in fields:
        normalized = _normalize_items(
            [item.model_dump() for item in patch.items] if patch.items else []
        )

    if "client_name" in fields:
        invoice.client_name = patch.client_name.strip()
    if "client_email" in fields:
        invoice.client_email = _optional_text(patch.client_email)
    if "issue_date" in fields:
        invoice.issue_date = patch.issue_date
    if "due_date" in fields:
        invoice.due_date = patch.due_date
    if "notes" in fields:
        invoice.notes = _optional_text(patch.notes)
    if normalized is not None:
        # delete-orphan cascade removes the previous rows on flush
        invoice.items = _build_items(normalized)

    _commit(db, invoice, "update")
    logger.info(f"Invoice {invoice_id} updated ({', '.join(sorted(fields)) or 'no fields'})")
    return invoice


def update_invoice_status(db: Session, user_id: str, invoice_id: str, new_status) -> Invoice:
    """Advance an invoice one step along draft -> sent -> paid."""
    invoice = get_invoice(db, user_id, invoice_id)
    try:
        new_status = InvoiceStatus(new_status)
    except ValueError:
        raise ValidationError(f"Unknown invoice status: {new_status}")

    if new_status not in VALID_TRANSITIONS[invoice.status]:
        raise InvalidTransitionError(
            f"Cannot change status from {invoice.status.value} to {new_status.value}"
        )

    previous = invoice.status
    invoice.status = new_status
    _commit(db, invoice, "status change")
    logger.info(f"Invoice {invoice_id} status {previous.value} -> {new_status.value}")
    return invoice


def void_invoice(db: Session, user_id: str, invoice_id: str) -> Invoice:
    """Cancel a sent or paid invoice. Cancelled is terminal."""
    invoice = get_invoice(db, user_id, invoice_id)
    if invoice.status not in VOIDABLE_STATUSES:
        raise InvalidTransitionError("Only sent or paid invoices can be voided")

    previous = invoice.status
    invoice.status = InvoiceStatus.cancelled
    _commit(db, invoice, "void")
    logger.info(f"Invoice {invoice_id} voided (was {previous.value})")
    return invoice


def delete_invoice(db: Session, user_id: str, invoice_id: str) -> None:
    """Delete a draft invoice; its items go with it."""
    invoice = get_invoice(db, user_id, invoice_id)
    if invoice.status != InvoiceStatus.draft:
        raise ImmutableStateError("Only draft invoices can be deleted")

    db.delete(invoice)
    try:
        db.commit()
        logger.info(f"Invoice {invoice_id} deleted by {user_id}")
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting invoice {invoice_id}")
        raise
