from pydantic import BaseModel, Field
from typing import Optional

from app.models.category import CategoryType


class CategoryCreate(BaseModel):
    name: str = Field(..., max_length=100)
    type: CategoryType


class CategoryUpdate(BaseModel):
    name: str = Field(..., max_length=100)


class CategoryResponse(BaseModel):
    id: str
    name: str
    type: CategoryType
    is_default: bool

    class Config:
        from_attributes = True


class CategoryCreated(BaseModel):
    id: str
