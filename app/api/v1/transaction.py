from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.common.exceptions import AppError
from app.core.dependencies import get_db, get_current_user_id
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.receipt import ReceiptResponse
from app.schemas.transaction import (
    DashboardSummary,
    TransactionCreate,
    TransactionCreated,
    TransactionPage,
    TransactionResponse,
    TransactionTotals,
    TransactionUpdate,
)
from app.services.receipt_service import get_receipts_for_transaction
from app.services.transaction_service import (
    DEFAULT_PAGE_SIZE,
    create_transaction,
    delete_transaction,
    get_dashboard_summary,
    get_transaction,
    get_transaction_totals,
    get_transactions,
    update_transaction,
)
from app.utils.date_ranges import DatePreset, resolve_range
from app.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[TransactionPage])
def list_transactions(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None, description="Inclusive; covers the whole day"),
    preset: Optional[DatePreset] = Query(None, description="Quick range; overrides start/end"),
    category_ids: Optional[List[str]] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    """List transactions newest first with date range and category filters."""
    start, end = resolve_range(preset, start_date, end_date)
    rows, total, total_pages = get_transactions(
        db,
        user_id,
        start_date=start,
        end_date=end,
        category_ids=category_ids,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=TransactionPage(
        transactions=[TransactionResponse.model_validate(r) for r in rows],
        total=total,
        page=page,
        total_pages=total_pages,
    ))


@router.get("/totals", response_model=ApiResponse[TransactionTotals])
def transaction_totals(
    db: Session = Depends(get_db),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    preset: Optional[DatePreset] = Query(None),
    category_ids: Optional[List[str]] = Query(None),
    user_id: str = Depends(get_current_user_id),
):
    """Income, expense and net over every transaction matching the filters."""
    start, end = resolve_range(preset, start_date, end_date)
    totals = get_transaction_totals(db, user_id, start_date=start, end_date=end, category_ids=category_ids)
    return ApiResponse(data=TransactionTotals(**totals))


@router.get("/dashboard", response_model=ApiResponse[DashboardSummary])
def dashboard(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """This month's income and expenses plus the five most recent transactions."""
    summary = get_dashboard_summary(db, user_id)
    return ApiResponse(data=DashboardSummary(
        current_month_income=summary["current_month_income"],
        current_month_expenses=summary["current_month_expenses"],
        net_balance=summary["net_balance"],
        recent_transactions=[TransactionResponse.model_validate(t) for t in summary["recent_transactions"]],
    ))


@router.post("", response_model=ApiResponse[TransactionCreated], status_code=status.HTTP_201_CREATED)
def create_transaction_route(
    data: TransactionCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Record an income or expense. Amount is in cents."""
    try:
        transaction = create_transaction(
            db,
            user_id,
            transaction_type=data.type,
            amount=data.amount,
            category_id=data.category_id,
            date=data.date,
            description=data.description,
        )
        return ApiResponse(data=TransactionCreated(id=transaction.id))
    except AppError:
        raise
    except Exception:
        logger.exception("Error creating transaction")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create transaction",
        )


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionResponse])
def get_transaction_route(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    transaction = get_transaction(db, user_id, transaction_id)
    return ApiResponse(data=TransactionResponse.model_validate(transaction))


@router.put("/{transaction_id}", response_model=ApiResponse[TransactionResponse])
def update_transaction_route(
    transaction_id: str,
    patch: TransactionUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Change any subset of type, amount, description, category and date."""
    try:
        transaction = update_transaction(db, user_id, transaction_id, patch)
        return ApiResponse(data=TransactionResponse.model_validate(transaction))
    except AppError:
        raise
    except Exception:
        logger.exception("Error updating transaction")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update transaction",
        )


@router.delete("/{transaction_id}", response_model=ApiResponse[MessageResponse])
def delete_transaction_route(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        delete_transaction(db, user_id, transaction_id)
        return ApiResponse(data=MessageResponse(message="Transaction deleted successfully"))
    except AppError:
        raise
    except Exception:
        logger.exception("Error deleting transaction")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete transaction",
        )


@router.get("/{transaction_id}/receipts", response_model=ApiResponse[List[ReceiptResponse]])
def list_transaction_receipts(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Receipts attached to a transaction, newest first."""
    receipts = get_receipts_for_transaction(db, user_id, transaction_id)
    return ApiResponse(data=[ReceiptResponse.model_validate(r) for r in receipts])
