from __future__ import annotations

from dataclasses import asdict
from datetime import date

from flask import Flask, jsonify, request

from ..common.web import current_auth_session, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .service import MonthSelector, ReportPage, recent_months


def page_to_json(page: ReportPage) -> dict:
    return {
        "month": str(page.month),
        "page": page.page,
        "page_count": page.page_count,
        "total": page.total,
        "first_index": page.first_index,
        "last_index": page.last_index,
        "has_previous": page.has_previous,
        "has_next": page.has_next,
        "rows": [asdict(r) for r in page.rows],
    }


def _parse_page(value: str | None) -> int:
    if value is None or value == "":
        return 1
    try:
        return int(value)
    except ValueError:
        raise ValidationError("page must be an integer")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports", methods=["GET"], endpoint="time_report")
    @login_required
    async def time_report():
        month_arg = request.args.get("month")
        month = MonthSelector.parse(month_arg) if month_arg else MonthSelector.of(date.today())
        page_no = _parse_page(request.args.get("page"))

        aggregator = container.report_aggregator()
        await aggregator.select_month(current_auth_session().user_id, month)
        return jsonify(page_to_json(aggregator.go_to_page(page_no)))

    @app.route("/api/reports/months", methods=["GET"], endpoint="report_months")
    @login_required
    async def report_months():
        return jsonify({"months": [str(m) for m in recent_months(date.today())]})
