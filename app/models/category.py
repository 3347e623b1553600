import enum

from sqlalchemy import Boolean, Column, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import generate_custom_id


class CategoryType(str, enum.Enum):
    income = "income"
    expense = "expense"


class Category(Base):
    """Income or expense label owned by one user. Defaults are seeded at registration."""
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", "type", name="uq_categories_user_name_type"),
    )

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("CAT"))
    user_id = Column(String(20), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    type = Column(Enum(CategoryType, name="category_type"), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="categories")
    transactions = relationship("Transaction", back_populates="category")

    def __repr__(self):
        return f"<Category(id='{self.id}', name='{self.name}', type='{self.type.value}')>"
