from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import generate_custom_id
from app.models.category import CategoryType


class Transaction(Base):
    """Dated income/expense entry. Amount is stored in minor currency units (cents)."""
    __tablename__ = "transactions"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("TXN"))
    user_id = Column(String(20), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(CategoryType, name="transaction_type"), nullable=False)
    amount = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(String(20), ForeignKey("categories.id"), nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    # receipts are detached (transaction_id -> NULL) when the transaction goes away
    receipts = relationship("Receipt", back_populates="transaction")

    def __repr__(self):
        return f"<Transaction(id='{self.id}', type='{self.type.value}', amount={self.amount})>"
