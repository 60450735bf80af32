from flask import Blueprint, jsonify, request

from inventree.decorators import require_auth
from inventree.models.catalog import money_str
from inventree.services import reporting_service
from inventree.validation import ValidationError


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _serialize_top(entries: list[dict]) -> list[dict]:
    return [
        {
            "product_id": e["product_id"],
            "name": e["name"],
            "quantity": e["quantity"],
            "revenue": money_str(e["revenue"]),
        }
        for e in entries
    ]


@reports_bp.get("/today")
@require_auth
def todays_sales():
    summary = reporting_service.todays_sales()
    return jsonify({
        "since": summary["since"],
        "total_revenue": money_str(summary["total_revenue"]),
        "total_transactions": summary["total_transactions"],
        "sales": [s.to_dict() for s in summary["sales"]],
    }), 200


@reports_bp.get("/sales")
@require_auth
def sales_report():
    try:
        report = reporting_service.sales_report(
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({
        "start": report["start"],
        "end": report["end"],
        "total_revenue": money_str(report["total_revenue"]),
        "total_transactions": report["total_transactions"],
        "average_transaction": money_str(report["average_transaction"]),
        "top_products": _serialize_top(report["top_products"]),
        "sales": [s.to_dict() for s in report["sales"]],
    }), 200
