from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ReceiptResponse(BaseModel):
    id: str
    file_name: str
    file_path: str
    uploaded_at: datetime
    transaction_id: Optional[str] = None

    class Config:
        from_attributes = True


class ReceiptUploadResponse(BaseModel):
    id: str
    file_name: str
    file_path: str

    class Config:
        from_attributes = True


class ReceiptLink(BaseModel):
    transaction_id: str
