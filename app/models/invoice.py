import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import generate_custom_id
from app.utils.totals import invoice_total


class InvoiceStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    paid = "paid"
    cancelled = "cancelled"


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_number"),
    )

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("INV"))
    user_id = Column(String(20), ForeignKey("users.id"), nullable=False, index=True)
    invoice_number = Column(String(20), nullable=False)
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=True)
    status = Column(Enum(InvoiceStatus, name="invoice_status"), nullable=False,
                    default=InvoiceStatus.draft, server_default=InvoiceStatus.draft.value)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="invoices")
    items = relationship("InvoiceItem", back_populates="invoice",
                         cascade="all, delete-orphan", order_by="InvoiceItem.position")

    @property
    def total(self) -> int:
        """Sum of quantity x unit_price over the current items, never stored."""
        return invoice_total(self.items)

    def __repr__(self):
        return f"<Invoice(number='{self.invoice_number}', status='{self.status.value}')>"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("ITM"))
    invoice_id = Column(String(20), ForeignKey("invoices.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(500), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)

    invoice = relationship("Invoice", back_populates="items")
