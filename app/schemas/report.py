from typing import List

from pydantic import BaseModel


class MonthlyData(BaseModel):
    month: str  # e.g. "January 2026"
    year: int
    month_num: int  # 0-11
    income: int
    expense: int
    net: int


class IncomeExpenseReport(BaseModel):
    total_income: int
    total_expenses: int
    net_profit_loss: int
    monthly_breakdown: List[MonthlyData]


class CategoryBreakdownItem(BaseModel):
    category_id: str
    category_name: str
    amount: int
    percentage: float
