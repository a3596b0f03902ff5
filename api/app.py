"""Flask REST API exposing the household budget services."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from budget_core.config import Settings
from budget_core.exceptions import RecordNotFoundError, SnapshotError, ValidationError
from budget_core.snapshot import build_services, load_snapshot
from budget_core.validators import (
    CATEGORY_TYPES,
    validate_bool,
    validate_date,
    validate_enum,
    validate_int,
)


def create_app(
    settings: Optional[Settings] = None,
    snapshot: Optional[Dict[str, List[Dict[str, Any]]]] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()
    app.logger.setLevel(settings.log_level)

    if settings.is_development:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    if snapshot is None and settings.snapshot_path is not None:
        snapshot = load_snapshot(settings.snapshot_path)
    services = build_services(snapshot, settings.fiscal_start_month)
    category_service = services.categories
    budget_service = services.budgets
    expense_service = services.expenses
    report = services.report

    def _success(payload: Any, status: int = 200):
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(SnapshotError)
    def handle_snapshot_error(exc: SnapshotError):
        return _handle_error(exc, 500, "Snapshot error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _base_date() -> date:
        raw = request.args.get("date")
        if not raw:
            return date.today()
        return validate_date(raw, "date")

    @app.get("/categories")
    def list_categories():
        categories = category_service.list()
        return _success({"items": [category.to_dict() for category in categories]})

    @app.get("/budgets")
    def list_budgets():
        budgets = budget_service.list()
        return _success({"items": [budget.to_dict() for budget in budgets]})

    @app.get("/expenses")
    def list_expenses():
        filters: Dict[str, Any] = {}
        if request.args.get("category_id"):
            filters["category_id"] = validate_int(request.args["category_id"], "category_id")
        if request.args.get("category_type"):
            filters["category_type"] = validate_enum(
                request.args["category_type"], "category_type", CATEGORY_TYPES
            )
        for key in ("start", "end"):
            if request.args.get(key):
                filters[key] = validate_date(request.args[key], key)
        filters["include_deleted"] = validate_bool(
            request.args.get("include_deleted", ""), "include_deleted"
        )
        expenses = expense_service.list(**filters)
        return _success({"items": [expense.to_dict() for expense in expenses]})

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = expense_service.add(payload)
        return _success(expense.to_dict(), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        expense = expense_service.get(expense_id)
        return _success(expense.to_dict())

    @app.put("/expenses/<expense_id>")
    def update_expense(expense_id: str):
        payload = _json_body()
        expense = expense_service.update(expense_id, payload)
        return _success(expense.to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        expense = expense_service.delete(expense_id)
        return _success(expense.to_dict())

    @app.get("/fiscal-year")
    def fiscal_year():
        base_date = _base_date()
        payload = report.fiscal_year(base_date).to_dict()
        payload["fiscal_start_month"] = report.fiscal_start_month
        return _success(payload)

    @app.get("/fixed-costs")
    def fixed_costs():
        base_date = _base_date()
        items = report.fixed_costs(base_date)
        return _success({
            "month": f"{base_date.year:04d}-{base_date.month:02d}",
            "items": [item.to_dict() for item in items],
        })

    @app.get("/remaining")
    def remaining_summary():
        base_date = _base_date()
        items = report.summary(base_date)
        return _success({
            "date": base_date.isoformat(),
            "items": [item.to_dict() for item in items],
        })

    @app.get("/remaining/<int:category_id>")
    def remaining_for_category(category_id: int):
        summary = report.remaining_for(category_id, _base_date())
        return _success(summary.to_dict())

    return app
