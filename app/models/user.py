from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import generate_custom_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("USR"))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    categories = relationship("Category", back_populates="user")
    transactions = relationship("Transaction", back_populates="user")
    invoices = relationship("Invoice", back_populates="user")
    receipts = relationship("Receipt", back_populates="user")

    def __repr__(self):
        return f"<User(id='{self.id}', email='{self.email}')>"
