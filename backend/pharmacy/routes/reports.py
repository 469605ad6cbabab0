from flask import Blueprint, jsonify, g

from ..decorators import require_auth
from ..errors import ValidationError, error_response
from ..permissions import role_has_permission
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/<report_type>")
@require_auth
def get_report(report_type: str):
    """
    Tabular report by type.

    Pharmacists get sales, stock and low-stock; admins also get profit,
    inventory-value and purchase-history.
    """
    try:
        permission = reporting_service.required_permission(report_type)
    except ValidationError as e:
        return error_response(e.message, 400)

    if not role_has_permission(g.current_user.role, permission):
        return error_response(
            f"Permission denied: requires {permission}",
            403,
            {"requiredPermission": permission},
        )

    return jsonify(reporting_service.get_report(report_type)), 200
