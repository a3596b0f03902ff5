from datetime import date
from decimal import Decimal

import pytest

from budget_core.exceptions import DuplicateRecordError, RecordNotFoundError, ValidationError
from budget_core.models import Budget, Category
from budget_core.services import BudgetReportService, BudgetService, CategoryService, ExpenseService


def _categories():
    return CategoryService([
        Category(id=1, name="Rent", type="fixed"),
        Category(id=2, name="Food", type="daily"),
        Category(id=3, name="Social", type="one_time"),
    ])


def _services():
    categories = _categories()
    budgets = BudgetService(
        [
            Budget(category_id=1, yearly_amount=Decimal("1200000")),
            Budget(category_id=2, yearly_amount=Decimal("360000")),
        ],
        categories,
    )
    expenses = ExpenseService(categories)
    report = BudgetReportService(budgets, expenses, categories, 4)
    return categories, budgets, expenses, report


def test_category_service_rejects_duplicate_id():
    with pytest.raises(DuplicateRecordError):
        CategoryService([
            Category(id=2, name="Food", type="daily"),
            Category(id=2, name="Groceries", type="daily"),
        ])


def test_category_service_rejects_duplicate_name_case_insensitive():
    with pytest.raises(DuplicateRecordError):
        CategoryService([
            Category(id=2, name="Food", type="daily"),
            Category(id=4, name="food", type="daily"),
        ])


def test_category_service_lookup():
    categories = _categories()

    assert categories.is_fixed(1)
    assert not categories.is_fixed(2)
    assert categories.type_of(3) == "one_time"
    assert [category.id for category in categories.list()] == [1, 2, 3]
    with pytest.raises(RecordNotFoundError):
        categories.get(99)


def test_budget_service_rejects_duplicate_category():
    with pytest.raises(DuplicateRecordError):
        BudgetService([
            Budget(category_id=1, yearly_amount=Decimal("100")),
            Budget(category_id=1, yearly_amount=Decimal("200")),
        ])


def test_budget_service_rejects_unknown_category():
    with pytest.raises(RecordNotFoundError):
        BudgetService([Budget(category_id=9, yearly_amount=Decimal("100"))], _categories())


def test_budget_service_lookup():
    _, budgets, _, _ = _services()

    assert budgets.find(3) is None
    assert budgets.get(2).yearly_amount == Decimal("360000")
    assert [budget.category_id for budget in budgets.list()] == [1, 2]
    with pytest.raises(RecordNotFoundError):
        budgets.get(3)


def test_expense_service_add_normalises_payload():
    _, _, expenses, _ = _services()

    expense = expenses.add(
        {"category_id": 2, "amount": "1500", "date": "2024-05-03", "memo": "  lunch "}
    )

    assert expense.amount == Decimal("1500")
    assert expense.date == date(2024, 5, 3)
    assert expense.memo == "lunch"
    assert expense.is_deleted is False
    assert expenses.get(expense.id) == expense


@pytest.mark.parametrize(
    "payload",
    [
        {"category_id": 2, "amount": -1, "date": "2024-05-03"},
        {"category_id": 2, "amount": "Infinity", "date": "2024-05-03"},
        {"category_id": 2, "amount": "abc", "date": "2024-05-03"},
        {"category_id": 2, "amount": "NaN", "date": "2024-05-03"},
        {"category_id": 2, "amount": 100, "date": "03/05/2024"},
        {"category_id": True, "amount": 100, "date": "2024-05-03"},
    ],
)
def test_expense_service_add_rejects_invalid_payload(payload):
    _, _, expenses, _ = _services()

    with pytest.raises(ValidationError):
        expenses.add(payload)


def test_expense_service_accepts_zero_amount():
    _, _, expenses, report = _services()

    expense = expenses.add({"category_id": 2, "amount": "0", "date": "2024-05-03"})

    assert expense.amount == Decimal("0")
    assert report.remaining_for(2, date(2024, 5, 3)).spent == Decimal("0")


def test_expense_service_add_rejects_unknown_category():
    _, _, expenses, _ = _services()

    with pytest.raises(RecordNotFoundError):
        expenses.add({"category_id": 42, "amount": 100, "date": "2024-05-03"})


def test_expense_service_partial_update():
    _, _, expenses, _ = _services()
    expense = expenses.add({"category_id": 2, "amount": 800, "date": "2024-05-03", "memo": "bread"})

    updated = expenses.update(expense.id, {"amount": "950", "category_id": 3})

    assert updated.id == expense.id
    assert updated.amount == Decimal("950")
    assert updated.category_id == 3
    assert updated.memo == "bread"
    assert updated.date == expense.date


def test_expense_service_fixed_expense_keeps_category_and_date():
    _, _, expenses, _ = _services()
    rent = expenses.add({"category_id": 1, "amount": 100000, "date": "2024-04-25"})

    with pytest.raises(ValidationError):
        expenses.update(rent.id, {"date": "2024-04-26"})
    with pytest.raises(ValidationError):
        expenses.update(rent.id, {"category_id": 2})

    updated = expenses.update(rent.id, {"amount": 105000, "memo": "new lease"})
    assert updated.amount == Decimal("105000")
    assert updated.memo == "new lease"


def test_expense_service_soft_delete():
    _, _, expenses, _ = _services()
    expense = expenses.add({"category_id": 2, "amount": 800, "date": "2024-05-03"})

    deleted = expenses.delete(expense.id)

    assert deleted.is_deleted is True
    assert expenses.get(expense.id).is_deleted is True
    assert expenses.list() == []
    assert expenses.list(include_deleted=True) == [deleted]
    assert expenses.delete(expense.id) == deleted
    assert len(expenses.snapshot()) == 1
    with pytest.raises(RecordNotFoundError):
        expenses.update(expense.id, {"amount": 10})


def test_expense_service_delete_unknown():
    _, _, expenses, _ = _services()

    with pytest.raises(RecordNotFoundError):
        expenses.delete("missing")


def test_expense_service_list_filters():
    _, _, expenses, _ = _services()
    rent = expenses.add({"category_id": 1, "amount": 100000, "date": "2024-04-25"})
    lunch = expenses.add({"category_id": 2, "amount": 900, "date": "2024-04-02"})
    party = expenses.add({"category_id": 3, "amount": 5000, "date": "2024-05-10"})

    assert expenses.list() == [lunch, rent, party]
    assert expenses.list(category_id=2) == [lunch]
    assert expenses.list(category_type="one_time") == [party]
    assert expenses.list(start=date(2024, 4, 3), end=date(2024, 4, 30)) == [rent]


def test_expense_service_month_total():
    _, _, expenses, _ = _services()
    expenses.add({"category_id": 1, "amount": 100000, "date": "2024-04-25"})
    expenses.add({"category_id": 1, "amount": 2000, "date": "2024-04-01"})
    expenses.add({"category_id": 1, "amount": 100000, "date": "2024-05-25"})
    gone = expenses.add({"category_id": 1, "amount": 7, "date": "2024-04-03"})
    expenses.delete(gone.id)

    assert expenses.month_total(1, date(2024, 4, 15)) == Decimal("102000")
    assert expenses.month_total(2, date(2024, 4, 15)) == Decimal("0")


def test_report_service_fixed_costs_per_month():
    _, _, expenses, report = _services()
    expenses.add({"category_id": 1, "amount": 100000, "date": "2024-04-25"})
    expenses.add({"category_id": 1, "amount": 100000, "date": "2024-05-25"})
    expenses.add({"category_id": 2, "amount": 900, "date": "2024-04-02"})

    totals = report.fixed_costs(date(2024, 4, 30))

    assert [(total.category_id, total.total) for total in totals] == [(1, Decimal("100000"))]
    assert totals[0].to_dict() == {
        "category_id": 1,
        "category_name": "Rent",
        "month": "2024-04",
        "total": "100000",
    }


def test_report_service_end_to_end():
    _, _, expenses, report = _services()
    expenses.add({"category_id": 1, "amount": 100000, "date": "2024-04-01"})

    summary = report.remaining_for(1, date(2024, 4, 1))

    assert summary.category_name == "Rent"
    assert summary.spent == Decimal("100000")
    assert summary.yearly_remaining == Decimal("1100000")
    assert summary.remaining_months == 12
    assert summary.monthly_remaining == 91666
    assert summary.remaining_days == 30
    assert summary.daily_remaining == 3055
    assert summary.fiscal_year.end == date(2025, 3, 31)


def test_report_service_reflects_soft_delete():
    _, _, expenses, report = _services()
    expense = expenses.add({"category_id": 2, "amount": 60000, "date": "2024-04-10"})

    before = report.remaining_for(2, date(2024, 4, 10))
    expenses.delete(expense.id)
    after = report.remaining_for(2, date(2024, 4, 10))

    assert before.yearly_remaining == Decimal("300000")
    assert after.yearly_remaining == Decimal("360000")
    assert after.spent == Decimal("0")


def test_report_service_summary_covers_every_budget():
    _, _, _, report = _services()

    summary = report.summary(date(2025, 1, 15))

    assert [item.category_id for item in summary] == [1, 2]
    assert report.fiscal_year(date(2025, 1, 15)).start == date(2024, 4, 1)


def test_report_service_rejects_invalid_fiscal_start_month():
    categories, budgets, expenses, _ = _services()

    with pytest.raises(ValidationError):
        BudgetReportService(budgets, expenses, categories, 13)
