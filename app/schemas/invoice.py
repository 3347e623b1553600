from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from app.models.invoice import InvoiceStatus


class InvoiceItemInput(BaseModel):
    description: str = ""
    quantity: Decimal
    unit_price: Decimal  # minor units


class InvoiceCreate(BaseModel):
    client_name: str = ""
    client_email: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[InvoiceItemInput] = []


class InvoiceUpdate(BaseModel):
    """Patch for a draft invoice. `items`, when present, replaces every line item."""
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    items: Optional[List[InvoiceItemInput]] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceItemResponse(BaseModel):
    id: str
    description: str
    quantity: int
    unit_price: int

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    client_name: str
    client_email: Optional[str] = None
    status: InvoiceStatus
    issue_date: date
    due_date: date
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[InvoiceItemResponse]
    total: int

    class Config:
        from_attributes = True


class InvoiceListItem(BaseModel):
    id: str
    invoice_number: str
    client_name: str
    status: InvoiceStatus
    issue_date: date
    due_date: date
    total: int


class InvoiceCreated(BaseModel):
    id: str
    invoice_number: str
