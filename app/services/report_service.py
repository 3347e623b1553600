from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.common.exceptions import ValidationError
from app.logger_config import logger
from app.models.category import Category, CategoryType
from app.models.transaction import Transaction
from app.utils.totals import INCOME, percentage_of

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]


class ReportService:
    """
    Read-only aggregations over the transaction ledger.
    Rows are fetched for the range and grouped in memory; nothing is cached.
    """
    def __init__(self, db: Session):
        self.db = db

    def _check_range(self, start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be before end date")

    def _range_query(self, query, start_date: Optional[datetime], end_date: Optional[datetime]):
        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)
        return query

    # ================= INCOME / EXPENSE ===================

    def income_expense_report(
        self,
        user_id: str,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
    ) -> dict:
        self._check_range(start_date, end_date)

        query = self.db.query(Transaction.type, Transaction.amount, Transaction.date).filter(
            Transaction.user_id == user_id
        )
        rows = self._range_query(query, start_date, end_date).order_by(Transaction.date.asc()).all()

        total_income = 0
        total_expenses = 0
        monthly: Dict[Tuple[int, int], Dict[str, int]] = {}

        for row in rows:
            # month index is 0-11
            key = (row.date.year, row.date.month - 1)
            bucket = monthly.setdefault(key, {"income": 0, "expense": 0})
            if row.type == INCOME:
                total_income += row.amount
                bucket["income"] += row.amount
            else:
                total_expenses += row.amount
                bucket["expense"] += row.amount

        monthly_breakdown = [
            {
                "month": f"{MONTH_NAMES[month_num]} {year}",
                "year": year,
                "month_num": month_num,
                "income": data["income"],
                "expense": data["expense"],
                "net": data["income"] - data["expense"],
            }
            for (year, month_num), data in sorted(monthly.items())
        ]

        logger.debug(f"Income/expense report for {user_id}: {len(rows)} rows, {len(monthly_breakdown)} months")
        return {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "net_profit_loss": total_income - total_expenses,
            "monthly_breakdown": monthly_breakdown,
        }

    # ================= CATEGORY BREAKDOWN ===================

    def category_breakdown(
        self,
        user_id: str,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        category_type,
    ) -> List[dict]:
        self._check_range(start_date, end_date)
        try:
            category_type = CategoryType(category_type)
        except ValueError:
            raise ValidationError("Category type must be 'income' or 'expense'")

        query = (
            self.db.query(Transaction.category_id, Category.name, Transaction.amount)
            .join(Category, Transaction.category_id == Category.id)
            .filter(Transaction.user_id == user_id, Transaction.type == category_type)
        )
        rows = self._range_query(query, start_date, end_date).all()

        grand_total = 0
        by_category: Dict[str, dict] = {}
        for category_id, category_name, amount in rows:
            entry = by_category.setdefault(
                category_id,
                {"category_id": category_id, "category_name": category_name, "amount": 0},
            )
            entry["amount"] += amount
            grand_total += amount

        breakdown = [
            {**entry, "percentage": percentage_of(entry["amount"], grand_total)}
            for entry in by_category.values()
        ]
        breakdown.sort(key=lambda entry: entry["amount"], reverse=True)
        return breakdown
