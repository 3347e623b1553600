from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from app.models.category import CategoryType


class TransactionCreate(BaseModel):
    """Amount in minor units (cents); fractional values are rounded."""
    type: CategoryType
    amount: Decimal
    description: Optional[str] = None
    category_id: str
    date: datetime


class TransactionUpdate(BaseModel):
    """Patch: only the fields present in the request body are applied."""
    type: Optional[CategoryType] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    date: Optional[datetime] = None


class TransactionCategoryRef(BaseModel):
    id: str
    name: str
    type: CategoryType

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    id: str
    type: CategoryType
    amount: int
    description: Optional[str] = None
    category_id: str
    date: datetime
    created_at: datetime
    updated_at: datetime
    category: TransactionCategoryRef

    class Config:
        from_attributes = True


class TransactionCreated(BaseModel):
    id: str


class TransactionPage(BaseModel):
    transactions: List[TransactionResponse]
    total: int
    page: int
    total_pages: int


class TransactionTotals(BaseModel):
    income: int
    expense: int
    net: int


class DashboardSummary(BaseModel):
    current_month_income: int
    current_month_expenses: int
    net_balance: int
    recent_transactions: List[TransactionResponse]
