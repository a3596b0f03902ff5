"""Framework-agnostic business services for the household budget tracker."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from . import calculator
from .exceptions import DuplicateRecordError, RecordNotFoundError, ValidationError
from .models import (
    Budget,
    Category,
    Expense,
    FiscalYearRange,
    FixedCostTotal,
    RemainingSummary,
)
from .validators import (
    parse_amount,
    validate_date,
    validate_fiscal_start_month,
    validate_int,
    validate_optional_str,
)

logger = logging.getLogger(__name__)


class CategoryService:
    """Indexed category catalog; ids and names are unique."""

    def __init__(self, categories: Iterable[Category] = ()) -> None:
        self._categories: Dict[int, Category] = {}
        for category in categories:
            self._register(category)

    def get(self, category_id: int) -> Category:
        try:
            return self._categories[category_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Category {category_id} not found") from exc

    def list(self) -> List[Category]:
        return sorted(self._categories.values(), key=lambda cat: cat.id)

    def type_of(self, category_id: int) -> str:
        return self.get(category_id).type

    def is_fixed(self, category_id: int) -> bool:
        return self.get(category_id).is_fixed

    def _register(self, category: Category) -> None:
        if category.id in self._categories:
            raise DuplicateRecordError(f"Category {category.id} already exists")
        canonical = category.name.lower()
        if any(existing.name.lower() == canonical for existing in self._categories.values()):
            raise DuplicateRecordError("Category name must be unique")
        self._categories[category.id] = category


class BudgetService:
    """Yearly allocations indexed by category; one budget per category."""

    def __init__(
        self, budgets: Iterable[Budget] = (), categories: Optional[CategoryService] = None
    ) -> None:
        self._categories = categories
        self._budgets: Dict[int, Budget] = {}
        for budget in budgets:
            self._register(budget)

    def get(self, category_id: int) -> Budget:
        budget = self.find(category_id)
        if budget is None:
            raise RecordNotFoundError(f"Budget for category {category_id} not found")
        return budget

    def find(self, category_id: int) -> Optional[Budget]:
        return self._budgets.get(category_id)

    def list(self) -> List[Budget]:
        return sorted(self._budgets.values(), key=lambda budget: budget.category_id)

    def _register(self, budget: Budget) -> None:
        if self._categories is not None:
            self._categories.get(budget.category_id)
        if budget.category_id in self._budgets:
            raise DuplicateRecordError(
                f"Budget for category {budget.category_id} already exists"
            )
        self._budgets[budget.category_id] = budget


class ExpenseService:
    """In-memory expense store with soft deletion."""

    def __init__(self, categories: CategoryService, expenses: Iterable[Expense] = ()) -> None:
        self._categories = categories
        self._expenses: Dict[str, Expense] = {}
        for expense in expenses:
            if expense.id in self._expenses:
                raise DuplicateRecordError(f"Expense {expense.id} already exists")
            self._categories.get(expense.category_id)
            self._expenses[expense.id] = expense

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> Expense:
        data = self._validate_payload(payload)
        expense = Expense(**data)
        self._expenses[expense.id] = expense
        logger.info("Added expense %s to category %s", expense.id, expense.category_id)
        return expense

    def update(self, expense_id: str, changes: Dict[str, object]) -> Expense:
        existing = self._get_live_or_raise(expense_id)
        # Merge existing serialised data with incoming changes to support partial updates.
        merged_payload = {**existing.to_dict(), **changes}
        data = self._validate_payload(merged_payload, current=existing)
        if self._categories.is_fixed(existing.category_id):
            if data["category_id"] != existing.category_id:
                raise ValidationError("category_id of a fixed expense cannot be changed")
            if data["date"] != existing.date:
                raise ValidationError("date of a fixed expense cannot be changed")
        updated = Expense(**data)
        self._expenses[expense_id] = updated
        logger.info("Updated expense %s", expense_id)
        return updated

    def delete(self, expense_id: str) -> Expense:
        """Mark the expense deleted; it stays in the store but no longer counts."""
        existing = self._get_or_raise(expense_id)
        if existing.is_deleted:
            return existing
        deleted = replace(existing, is_deleted=True)
        self._expenses[expense_id] = deleted
        logger.info("Soft-deleted expense %s", expense_id)
        return deleted

    def get(self, expense_id: str) -> Expense:
        """Return an expense, deleted or not, or raise if it does not exist."""
        return self._get_or_raise(expense_id)

    def list(
        self,
        *,
        category_id: Optional[int] = None,
        category_type: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_deleted: bool = False,
    ) -> List[Expense]:
        def matches(expense: Expense) -> bool:
            if expense.is_deleted and not include_deleted:
                return False
            if category_id is not None and expense.category_id != category_id:
                return False
            if category_type is not None and self._categories.type_of(expense.category_id) != category_type:
                return False
            if start and expense.date < start:
                return False
            if end and expense.date > end:
                return False
            return True

        records = filter(matches, self._expenses.values())
        return sorted(records, key=lambda exp: (exp.date, exp.id))

    def month_total(self, category_id: int, reference: date) -> Decimal:
        """Sum live expenses of a category within the calendar month of ``reference``."""
        return sum(
            (
                expense.amount
                for expense in self._expenses.values()
                if not expense.is_deleted
                and expense.category_id == category_id
                and (expense.date.year, expense.date.month) == (reference.year, reference.month)
            ),
            start=Decimal("0"),
        )

    def snapshot(self) -> Tuple[Expense, ...]:
        """Return every record, deleted ones included, as an immutable sequence."""
        return tuple(self._expenses.values())

    # Internal helpers -----------------------------------------------------
    def _get_or_raise(self, expense_id: str) -> Expense:
        try:
            return self._expenses[expense_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Expense {expense_id} not found") from exc

    def _get_live_or_raise(self, expense_id: str) -> Expense:
        expense = self._get_or_raise(expense_id)
        if expense.is_deleted:
            raise RecordNotFoundError(f"Expense {expense_id} has been deleted")
        return expense

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[Expense] = None
    ) -> Dict[str, object]:
        category_id = validate_int(payload.get("category_id"), "category_id")
        self._categories.get(category_id)
        return {
            "id": current.id if current else str(uuid4()),
            "category_id": category_id,
            "amount": parse_amount(payload.get("amount"), "amount"),
            "date": validate_date(payload.get("date"), "date"),
            "memo": validate_optional_str(payload.get("memo"), "memo", 200),
            "is_deleted": current.is_deleted if current else False,
        }


class BudgetReportService:
    """Runs the remaining-budget cascade against the live expense store."""

    def __init__(
        self,
        budgets: BudgetService,
        expenses: ExpenseService,
        categories: CategoryService,
        fiscal_start_month: int,
    ) -> None:
        self._budgets = budgets
        self._expenses = expenses
        self._categories = categories
        self._fiscal_start_month = validate_fiscal_start_month(fiscal_start_month)

    @property
    def fiscal_start_month(self) -> int:
        return self._fiscal_start_month

    def fiscal_year(self, base_date: date) -> FiscalYearRange:
        return calculator.fiscal_year_range(base_date, self._fiscal_start_month)

    def remaining_for(self, category_id: int, base_date: date) -> RemainingSummary:
        return self._summarise(self._budgets.get(category_id), base_date)

    def summary(self, base_date: date) -> List[RemainingSummary]:
        return [self._summarise(budget, base_date) for budget in self._budgets.list()]

    def fixed_costs(self, reference: date) -> List[FixedCostTotal]:
        """Monthly spend of every fixed category for the month of ``reference``."""
        return [
            FixedCostTotal(
                category_id=category.id,
                category_name=category.name,
                year=reference.year,
                month=reference.month,
                total=self._expenses.month_total(category.id, reference),
            )
            for category in self._categories.list()
            if category.is_fixed
        ]

    def _summarise(self, budget: Budget, base_date: date) -> RemainingSummary:
        start_month = self._fiscal_start_month
        expenses = self._expenses.snapshot()
        period = calculator.fiscal_year_range(base_date, start_month)
        spent = calculator.yearly_expense_total(expenses, budget.category_id, period)
        logger.debug(
            "Computing remaining budget for category %s on %s", budget.category_id, base_date
        )
        return RemainingSummary(
            category_id=budget.category_id,
            category_name=self._categories.get(budget.category_id).name,
            base_date=base_date,
            fiscal_year=period,
            yearly_amount=budget.yearly_amount,
            spent=Decimal(spent),
            yearly_remaining=Decimal(
                calculator.yearly_remaining(budget, expenses, base_date, start_month)
            ),
            monthly_remaining=calculator.monthly_remaining(budget, expenses, base_date, start_month),
            daily_remaining=calculator.daily_remaining(budget, expenses, base_date, start_month),
            remaining_months=calculator.remaining_months(base_date, start_month),
            remaining_days=calculator.remaining_days(base_date),
        )
