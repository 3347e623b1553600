from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.dependencies import get_db, get_current_user_id
from app.services.report_service import ReportService
from app.schemas.report import IncomeExpenseReport, CategoryBreakdownItem
from app.schemas.common import ApiResponse
from app.utils.date_ranges import DatePreset, resolve_range

router = APIRouter()


@router.get("/income-expense", response_model=ApiResponse[IncomeExpenseReport])
def income_expense_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    preset: Optional[DatePreset] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Income and expense totals for the range with a month-by-month breakdown.
    """
    start, end = resolve_range(preset, start_date, end_date)
    report = ReportService(db).income_expense_report(user_id, start, end)
    return ApiResponse(data=IncomeExpenseReport(**report))


@router.get("/category-breakdown", response_model=ApiResponse[List[CategoryBreakdownItem]])
def category_breakdown(
    type: str = Query("expense", description="income or expense"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    preset: Optional[DatePreset] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Per-category amounts and share of the total, largest first.
    """
    start, end = resolve_range(preset, start_date, end_date)
    breakdown = ReportService(db).category_breakdown(user_id, start, end, type)
    return ApiResponse(data=[CategoryBreakdownItem(**entry) for entry in breakdown])
