"""Console interface for the household budget tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from budget_core.config import Settings
from budget_core.exceptions import RecordNotFoundError, SnapshotError, ValidationError
from budget_core.models import Expense, RemainingSummary, format_amount
from budget_core.snapshot import Services, build_services, load_snapshot
from budget_core.validators import validate_fiscal_start_month

DATE_FORMAT = "YYYY-MM-DD"


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format {DATE_FORMAT}."
        ) from exc


def _parse_month(value: str) -> int:
    try:
        return validate_fiscal_start_month(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _format_summary(summary: RemainingSummary) -> str:
    fiscal_year = summary.fiscal_year
    return (
        f"[{summary.category_id}] {summary.category_name}\n"
        f"  Fiscal year: {fiscal_year.start.isoformat()} .. {fiscal_year.end.isoformat()}\n"
        f"  Budget: {format_amount(summary.yearly_amount)} | Spent: {format_amount(summary.spent)}\n"
        f"  Year: {format_amount(summary.yearly_remaining)} | "
        f"Month: {summary.monthly_remaining} ({summary.remaining_months} months left) | "
        f"Day: {summary.daily_remaining} ({summary.remaining_days} days left)\n"
    )


def _format_expense(expense: Expense) -> str:
    status = " (deleted)" if expense.is_deleted else ""
    return (
        f"[{expense.id}] {expense.date.isoformat()} category {expense.category_id} "
        f"{format_amount(expense.amount)}{status}\n"
        f"  Memo: {expense.memo or '-'}\n"
    )


def handle_remaining(args: argparse.Namespace, services: Services) -> None:
    base_date = args.date or date.today()
    if args.category_id is not None:
        summaries = [services.report.remaining_for(args.category_id, base_date)]
    else:
        summaries = services.report.summary(base_date)
    if not summaries:
        print("No budgets found.")
        return
    print(f"Remaining budget on {base_date.isoformat()}:")
    for summary in summaries:
        print(_format_summary(summary))


def handle_fiscal_year(args: argparse.Namespace, services: Services) -> None:
    base_date = args.date or date.today()
    fiscal_year = services.report.fiscal_year(base_date)
    print(f"Fiscal year: {fiscal_year.start.isoformat()} .. {fiscal_year.end.isoformat()}")


def handle_fixed_costs(args: argparse.Namespace, services: Services) -> None:
    base_date = args.date or date.today()
    totals = services.report.fixed_costs(base_date)
    if not totals:
        print("No fixed categories found.")
        return
    print(f"Fixed costs for {base_date.year:04d}-{base_date.month:02d}:")
    for total in totals:
        print(f"  [{total.category_id}] {total.category_name}: {format_amount(total.total)}")


def handle_expenses(args: argparse.Namespace, services: Services) -> None:
    expenses = services.expenses.list(
        category_id=args.category_id,
        start=args.start,
        end=args.end,
        include_deleted=args.include_deleted,
    )
    if not expenses:
        print("No expenses found.")
        return
    print(f"Found {len(expenses)} expenses:")
    for expense in expenses:
        print(_format_expense(expense))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Household Budget Tracker CLI")
    parser.add_argument(
        "--snapshot",
        type=Path,
        help="JSON snapshot with categories, budgets and expenses",
    )
    parser.add_argument(
        "--fiscal-start-month",
        type=_parse_month,
        help="Month (1-12) on which the fiscal year starts (default: from environment, else 4)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    remaining = subparsers.add_parser("remaining", help="Show remaining budget")
    remaining.add_argument("--date", type=_parse_date)
    remaining.add_argument("--category-id", type=int)

    fiscal_year = subparsers.add_parser("fiscal-year", help="Show fiscal year boundaries")
    fiscal_year.add_argument("--date", type=_parse_date)

    fixed_costs = subparsers.add_parser("fixed-costs", help="Show monthly fixed-cost totals")
    fixed_costs.add_argument("--date", type=_parse_date)

    expenses = subparsers.add_parser("expenses", help="List expenses")
    expenses.add_argument("--category-id", type=int)
    expenses.add_argument("--start", type=_parse_date)
    expenses.add_argument("--end", type=_parse_date)
    expenses.add_argument("--include-deleted", action="store_true")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env(fiscal_start_month=args.fiscal_start_month)
        logging.basicConfig(level=settings.log_level)
        snapshot_path = args.snapshot or settings.snapshot_path
        snapshot = load_snapshot(snapshot_path) if snapshot_path else None
        services = build_services(snapshot, settings.fiscal_start_month)

        if args.command == "remaining":
            handle_remaining(args, services)
        elif args.command == "fiscal-year":
            handle_fiscal_year(args, services)
        elif args.command == "fixed-costs":
            handle_fixed_costs(args, services)
        elif args.command == "expenses":
            handle_expenses(args, services)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown command: {args.command}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except SnapshotError as exc:
        print(f"Snapshot error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
