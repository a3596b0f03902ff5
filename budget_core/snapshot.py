"""Loading of read-only JSON snapshots that seed the catalogs and the expense store."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import SnapshotError, ValidationError
from .models import Budget, Category, Expense
from .services import BudgetReportService, BudgetService, CategoryService, ExpenseService
from .validators import (
    CATEGORY_TYPES,
    parse_amount,
    validate_bool,
    validate_date,
    validate_enum,
    validate_int,
    validate_optional_str,
    validate_required_str,
)

logger = logging.getLogger(__name__)

SECTIONS = ("categories", "budgets", "expenses")


@dataclass
class Services:
    categories: CategoryService
    budgets: BudgetService
    expenses: ExpenseService
    report: BudgetReportService


def load_snapshot(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    """Read a snapshot file; a missing file yields empty sections."""
    if not path.exists():
        logger.info("Snapshot %s not found, starting empty", path)
        return {section: [] for section in SECTIONS}
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Corrupted JSON data in {path}") from exc
    except OSError as exc:
        raise SnapshotError(f"Unable to read from {path}") from exc

    if not isinstance(payload, dict):
        raise SnapshotError(f"Expected object payload in {path}")
    snapshot: Dict[str, List[Dict[str, Any]]] = {}
    for section in SECTIONS:
        records = payload.get(section, [])
        if not isinstance(records, list):
            raise SnapshotError(f"Expected list for '{section}' in {path}")
        snapshot[section] = records
    logger.info(
        "Loaded snapshot %s: %d categories, %d budgets, %d expenses",
        path,
        len(snapshot["categories"]),
        len(snapshot["budgets"]),
        len(snapshot["expenses"]),
    )
    return snapshot


def _category(record: Dict[str, Any]) -> Category:
    return Category(
        id=validate_int(record.get("id"), "id"),
        name=validate_required_str(record.get("name"), "name", 50),
        type=validate_enum(record.get("type"), "type", CATEGORY_TYPES),
    )


def _budget(record: Dict[str, Any]) -> Budget:
    return Budget(
        category_id=validate_int(record.get("category_id"), "category_id"),
        yearly_amount=parse_amount(record.get("yearly_amount"), "yearly_amount"),
    )


def _expense(record: Dict[str, Any]) -> Expense:
    return Expense(
        id=validate_required_str(record.get("id"), "id", 64),
        category_id=validate_int(record.get("category_id"), "category_id"),
        amount=parse_amount(record.get("amount"), "amount"),
        date=validate_date(record.get("date"), "date"),
        memo=validate_optional_str(record.get("memo"), "memo", 200),
        is_deleted=validate_bool(record.get("is_deleted", False), "is_deleted"),
    )


def _hydrate(snapshot: Dict[str, List[Dict[str, Any]]], section: str, parse) -> List[Any]:
    hydrated = []
    for index, record in enumerate(snapshot.get(section, [])):
        if not isinstance(record, dict):
            raise SnapshotError(f"Expected object for {section}[{index}]")
        try:
            hydrated.append(parse(record))
        except ValidationError as exc:
            raise SnapshotError(f"Invalid record {section}[{index}]: {exc}") from exc
    return hydrated


def build_services(
    snapshot: Optional[Dict[str, List[Dict[str, Any]]]], fiscal_start_month: int
) -> Services:
    """Validate snapshot records and wire the catalogs, store and report service.

    Invalid records raise ``SnapshotError``; duplicate keys and references to
    unknown categories surface as ``DuplicateRecordError`` / ``RecordNotFoundError``.
    """
    snapshot = snapshot or {}
    categories = CategoryService(_hydrate(snapshot, "categories", _category))
    budgets = BudgetService(_hydrate(snapshot, "budgets", _budget), categories)
    expenses = ExpenseService(categories, _hydrate(snapshot, "expenses", _expense))
    report = BudgetReportService(budgets, expenses, categories, fiscal_start_month)
    return Services(categories=categories, budgets=budgets, expenses=expenses, report=report)
