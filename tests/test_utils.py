from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.utils.date_ranges import DatePreset, preset_range, resolve_range
from app.utils.totals import (
    MAX_MINOR_UNITS,
    income_expense_totals,
    invoice_total,
    percentage_of,
    to_minor_units,
)

NOW = datetime(2026, 3, 15, 10, 30)


class TestMoney:

    @pytest.mark.parametrize("value, expected", [
        (1250, 1250),
        (Decimal("1250.5"), 1251),
        (Decimal("1250.49"), 1250),
        (0.5, 1),
        ("2.5", 3),
    ])
    def test_to_minor_units_rounds_half_up(self, value, expected):
        assert to_minor_units(value) == expected

    @pytest.mark.parametrize("value", [Decimal("1e30"), 2_147_483_648, -2_147_483_649])
    def test_to_minor_units_out_of_range(self, value):
        with pytest.raises(ValueError, match="out of range"):
            to_minor_units(value)

    def test_to_minor_units_upper_bound(self):
        assert to_minor_units(MAX_MINOR_UNITS) == MAX_MINOR_UNITS

    def test_invoice_total(self):
        items = [
            SimpleNamespace(quantity=2, unit_price=15000),
            SimpleNamespace(quantity=1, unit_price=2500),
        ]
        assert invoice_total(items) == 32500
        assert invoice_total([]) == 0

    def test_income_expense_totals(self):
        rows = [
            SimpleNamespace(type="income", amount=1000),
            SimpleNamespace(type="expense", amount=300),
            SimpleNamespace(type="expense", amount=200),
        ]
        assert income_expense_totals(rows) == {"income": 1000, "expense": 500, "net": 500}

    def test_percentage_of_zero_total(self):
        assert percentage_of(0, 0) == 0.0
        assert percentage_of(1, 3) == 33.33


class TestDateRanges:

    def test_this_month(self):
        assert preset_range(DatePreset.this_month, now=NOW) == (
            datetime(2026, 3, 1),
            datetime(2026, 3, 31, 23, 59, 59, 999999),
        )

    def test_last_month_across_year_boundary(self):
        start, end = preset_range(DatePreset.last_month, now=datetime(2026, 1, 5))
        assert start == datetime(2025, 12, 1)
        assert end.date() == date(2025, 12, 31)

    def test_this_year(self):
        start, end = preset_range(DatePreset.this_year, now=NOW)
        assert start == datetime(2026, 1, 1)
        assert end.date() == date(2026, 12, 31)

    def test_last_30_days(self):
        start, end = preset_range(DatePreset.last_30_days, now=NOW)
        assert start == datetime(2026, 2, 13)
        assert end.date() == date(2026, 3, 15)

    def test_all_time(self):
        assert preset_range(DatePreset.all_time, now=NOW) == (None, None)

    def test_explicit_dates_cover_whole_days(self):
        start, end = resolve_range(start_date=date(2026, 1, 10), end_date=date(2026, 1, 10))
        assert start == datetime(2026, 1, 10)
        assert end == datetime(2026, 1, 10, 23, 59, 59, 999999)

    def test_preset_wins_over_dates(self):
        start, _ = resolve_range(DatePreset.this_month, start_date=date(2020, 1, 1), now=NOW)
        assert start == datetime(2026, 3, 1)

    def test_open_range(self):
        assert resolve_range() == (None, None)
