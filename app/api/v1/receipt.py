from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import Optional
from app.common.exceptions import AppError
from app.core.config import settings
from app.core.dependencies import get_db, get_current_user_id
from app.services.receipt_service import (
    content_type_for,
    delete_receipt,
    get_receipt_file,
    link_receipt_to_transaction,
    upload_receipt,
    validate_upload
)
from app.schemas.receipt import ReceiptLink, ReceiptResponse, ReceiptUploadResponse
from app.schemas.common import ApiResponse, MessageResponse
from app.logger_config import logger

router = APIRouter()
uploads_router = APIRouter()


@router.post("/upload", response_model=ApiResponse[ReceiptUploadResponse], status_code=status.HTTP_201_CREATED)
def upload_receipt_route(
    file: UploadFile = File(...),
    transaction_id: Optional[str] = Form(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Upload a JPG, PNG or PDF receipt (max 5MB), optionally attached to a transaction.
    """
    # one byte past the limit is enough to reject oversized uploads
    content = file.file.read(settings.MAX_UPLOAD_SIZE + 1)
    validate_upload(file.content_type, len(content))

    try:
        receipt = upload_receipt(
            db,
            user_id,
            file_name=file.filename,
            content=content,
            transaction_id=transaction_id
        )
        return ApiResponse(data=ReceiptUploadResponse.model_validate(receipt))
    except AppError:
        raise
    except Exception:
        logger.exception("Error uploading receipt")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload receipt"
        )


@router.put("/{receipt_id}/link", response_model=ApiResponse[ReceiptResponse])
def link_receipt_route(
    receipt_id: str,
    link_data: ReceiptLink,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Attach an existing receipt to one of the user's transactions.
    """
    try:
        receipt = link_receipt_to_transaction(db, user_id, receipt_id, link_data.transaction_id)
        return ApiResponse(data=ReceiptResponse.model_validate(receipt))
    except AppError:
        raise
    except Exception:
        logger.exception("Error linking receipt")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to link receipt"
        )


@router.delete("/{receipt_id}", response_model=ApiResponse[MessageResponse])
def delete_receipt_route(
    receipt_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        delete_receipt(db, user_id, receipt_id)
        return ApiResponse(data=MessageResponse(message="Receipt deleted successfully"))
    except AppError:
        raise
    except Exception:
        logger.exception("Error deleting receipt")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete receipt"
        )


@uploads_router.get("/{filename}")
def serve_upload(
    filename: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Stream one of the current user's stored receipt files."""
    location = get_receipt_file(db, user_id, filename)
    return FileResponse(
        location,
        media_type=content_type_for(filename),
        headers={"Cache-Control": "private, max-age=3600"}
    )
