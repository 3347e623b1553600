from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope; failures use {"success": false, "error": "..."}."""
    success: bool = True
    data: T


class MessageResponse(BaseModel):
    message: str
