from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import generate_custom_id


class Receipt(Base):
    """Uploaded receipt file, optionally attached to a transaction."""
    __tablename__ = "receipts"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("RCP"))
    user_id = Column(String(20), ForeignKey("users.id"), nullable=False, index=True)
    transaction_id = Column(String(20), ForeignKey("transactions.id", ondelete="SET NULL"),
                            nullable=True, index=True)
    file_path = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    uploaded_at = Column(DateTime, default=datetime.now)

    user = relationship("User", back_populates="receipts")
    transaction = relationship("Transaction", back_populates="receipts")
