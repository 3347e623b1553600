from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.common.exceptions import AppError
from app.core.dependencies import get_db, get_current_user_id
from app.services.invoice_service import (
    get_invoice,
    get_invoices,
    create_invoice,
    update_invoice,
    update_invoice_status,
    void_invoice,
    delete_invoice
)
from app.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceStatusUpdate,
    InvoiceResponse,
    InvoiceListItem,
    InvoiceCreated,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[List[InvoiceListItem]])
def list_invoices(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get the user's invoices, newest issue date first, each with its computed total.
    """
    invoices = get_invoices(db, user_id)
    return ApiResponse(data=[InvoiceListItem(**inv) for inv in invoices])


@router.get("/{invoice_id}", response_model=ApiResponse[InvoiceResponse])
def get_invoice_route(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    invoice = get_invoice(db, user_id, invoice_id)
    return ApiResponse(data=InvoiceResponse.model_validate(invoice))


@router.post("", response_model=ApiResponse[InvoiceCreated], status_code=status.HTTP_201_CREATED)
def create_invoice_route(
    invoice_data: InvoiceCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a draft invoice with its line items. The invoice number is assigned here.
    """
    try:
        invoice = create_invoice(
            db,
            user_id,
            client_name=invoice_data.client_name,
            issue_date=invoice_data.issue_date,
            due_date=invoice_data.due_date,
            items=invoice_data.items,
            client_email=invoice_data.client_email,
            notes=invoice_data.notes
        )
        return ApiResponse(data=InvoiceCreated(id=invoice.id, invoice_number=invoice.invoice_number))
    except AppError:
        raise
    except Exception:
        logger.exception("Error creating invoice")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create invoice"
        )


@router.put("/{invoice_id}", response_model=ApiResponse[InvoiceResponse])
def update_invoice_route(
    invoice_id: str,
    patch: InvoiceUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Edit a draft invoice. Sending `items` replaces all line items.
    """
    try:
        invoice = update_invoice(db, user_id, invoice_id, patch)
        return ApiResponse(data=InvoiceResponse.model_validate(invoice))
    except AppError:
        raise
    except Exception:
        logger.exception("Error updating invoice")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update invoice"
        )


@router.patch("/{invoice_id}/status", response_model=ApiResponse[InvoiceResponse])
def update_invoice_status_route(
    invoice_id: str,
    status_data: InvoiceStatusUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Move an invoice along draft -> sent -> paid, or cancel it.
    """
    try:
        invoice = update_invoice_status(db, user_id, invoice_id, status_data.status)
        return ApiResponse(data=InvoiceResponse.model_validate(invoice))
    except AppError:
        raise
    except Exception:
        logger.exception("Error updating invoice status")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update invoice status"
        )


@router.post("/{invoice_id}/void", response_model=ApiResponse[InvoiceResponse])
def void_invoice_route(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Cancel a sent or paid invoice.
    """
    try:
        invoice = void_invoice(db, user_id, invoice_id)
        return ApiResponse(data=InvoiceResponse.model_validate(invoice))
    except AppError:
        raise
    except Exception:
        logger.exception("Error voiding invoice")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to void invoice"
        )


@router.delete("/{invoice_id}", response_model=ApiResponse[MessageResponse])
def delete_invoice_route(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a draft invoice together with its line items.
    """
    try:
        delete_invoice(db, user_id, invoice_id)
        return ApiResponse(data=MessageResponse(message="Invoice deleted successfully"))
    except AppError:
        raise
    except Exception:
        logger.exception("Error deleting invoice")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete invoice"
        )
