from flask import Blueprint, jsonify, request

from app.services import dashboard_service
from app.validation import ValidationError


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
def dashboard():
    period = request.args.get("period", "today")
    return jsonify(dashboard_service.dashboard_summary(period)), 200


@dashboard_bp.get("/profit-loss")
def profit_loss():
    try:
        statement = dashboard_service.profit_and_loss(
            request.args.get("start_date"),
            request.args.get("end_date"),
        )
    except ValidationError as exc:
        return jsonify(exc.to_dict()), 400
    return jsonify(statement), 200
