"""Core business logic package for the household budget tracker."""

from .calculator import (
    daily_remaining,
    fiscal_year_range,
    monthly_remaining,
    remaining_days,
    remaining_months,
    yearly_expense_total,
    yearly_remaining,
)
from .config import Settings
from .exceptions import DuplicateRecordError, RecordNotFoundError, SnapshotError, ValidationError
from .models import Budget, Category, Expense, FiscalYearRange, RemainingSummary
from .services import BudgetReportService, BudgetService, CategoryService, ExpenseService
from .snapshot import Services, build_services, load_snapshot

__all__ = [
    "Budget",
    "Category",
    "Expense",
    "FiscalYearRange",
    "RemainingSummary",
    "BudgetReportService",
    "BudgetService",
    "CategoryService",
    "ExpenseService",
    "Services",
    "Settings",
    "build_services",
    "load_snapshot",
    "daily_remaining",
    "fiscal_year_range",
    "monthly_remaining",
    "remaining_days",
    "remaining_months",
    "yearly_expense_total",
    "yearly_remaining",
    "DuplicateRecordError",
    "RecordNotFoundError",
    "SnapshotError",
    "ValidationError",
]
