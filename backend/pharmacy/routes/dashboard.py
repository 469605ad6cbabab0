from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_stats():
    return jsonify(dashboard_service.get_dashboard_stats()), 200
