from flask import Blueprint, jsonify, request, g

from app.decorators import require_user
from app.services import reporting_service
from app.services.pagination import parse_page_args
from app.validation import NotFoundError, ValidationError


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("")
def list_reports():
    try:
        page, per_page = parse_page_args(request.args)
    except ValidationError as exc:
        return jsonify(exc.to_dict()), 400

    result = reporting_service.list_reports(
        report_type=request.args.get("report_type"),
        page=page,
        per_page=per_page,
    )
    return jsonify(result), 200


@reports_bp.post("/generate")
@require_user
def generate_report():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        report = reporting_service.generate_report(
            user_id=g.current_user.id,
            report_type=payload.get("report_type"),
            start=payload.get("start_date"),
            end=payload.get("end_date"),
        )
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({
        "message": "Report generated successfully",
        "report": report.to_dict(with_user=True),
    }), 201


@reports_bp.get("/sales")
def sales_report():
    try:
        report = reporting_service.sales_report(
            request.args.get("start_date"),
            request.args.get("end_date"),
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/expenses")
def expense_report():
    try:
        report = reporting_service.expense_report(
            request.args.get("start_date"),
            request.args.get("end_date"),
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/<int:report_id>")
def get_report(report_id: int):
    try:
        return jsonify(reporting_service.get_report(report_id)), 200
    except NotFoundError as exc:
        return jsonify(exc.to_dict()), 404


@reports_bp.delete("/<int:report_id>")
@require_user
def delete_report(report_id: int):
    try:
        reporting_service.delete_report(report_id)
    except NotFoundError as exc:
        return jsonify(exc.to_dict()), 404
    return jsonify({"message": "Report deleted successfully"}), 200
