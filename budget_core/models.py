"""Data models for the household budget domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

__all__ = [
    "FIXED_CATEGORY_TYPE",
    "Budget",
    "Category",
    "Expense",
    "FiscalYearRange",
    "FixedCostTotal",
    "RemainingSummary",
    "format_amount",
    "parse_date",
]

FIXED_CATEGORY_TYPE = "fixed"


def parse_date(value: str) -> date:
    """Parse an ISO 8601 calendar date, accepting full datetimes by dropping the time."""
    value = value.strip()
    if len(value) > 10:
        # Datetime strings such as 2024-04-01T09:30:00Z are reduced to their date part.
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value).date()
    return date.fromisoformat(value)


def format_amount(amount: Decimal) -> str:
    """Render an amount in plain notation without trailing fractional zeros."""
    # Fixed-point formatting is exact at any magnitude; quantize and normalize are not.
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    type: str

    @property
    def is_fixed(self) -> bool:
        return self.type == FIXED_CATEGORY_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type}



@dataclass(frozen=True)
class Budget:
    """Yearly allocation for a single category."""

    category_id: int
    yearly_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "yearly_amount": format_amount(self.yearly_amount),
        }



@dataclass(frozen=True)
class Expense:
    id: str
    category_id: int
    amount: Decimal
    date: date
    memo: Optional[str] = None
    is_deleted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "category_id": self.category_id,
            "amount": format_amount(self.amount),
            "date": self.date.isoformat(),
            "memo": self.memo,
            "is_deleted": self.is_deleted,
        }



@dataclass(frozen=True)
class FiscalYearRange:
    """Twelve calendar months of a fiscal year, both ends inclusive."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class RemainingSummary:
    """Remaining-budget figures for one category on one reference date."""

    category_id: int
    category_name: str
    base_date: date
    fiscal_year: FiscalYearRange
    yearly_amount: Decimal
    spent: Decimal
    yearly_remaining: Decimal
    monthly_remaining: int
    daily_remaining: int
    remaining_months: int
    remaining_days: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "date": self.base_date.isoformat(),
            "fiscal_year": self.fiscal_year.to_dict(),
            "yearly_amount": format_amount(self.yearly_amount),
            "spent": format_amount(self.spent),
            "yearly_remaining": format_amount(self.yearly_remaining),
            "monthly_remaining": self.monthly_remaining,
            "daily_remaining": self.daily_remaining,
            "remaining_months": self.remaining_months,
            "remaining_days": self.remaining_days,
        }


@dataclass(frozen=True)
class FixedCostTotal:
    """Spend of a fixed category within one calendar month."""

    category_id: int
    category_name: str
    year: int
    month: int
    total: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "month": f"{self.year:04d}-{self.month:02d}",
            "total": format_amount(self.total),
        }
