# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/pharmacy/routes/sales.py
"""Sales API routes with permission enforcement"""

from flask import Blueprint, request, jsonify

from ..services import sales_service
from ..errors import ConsistencyError, NotFoundError, ValidationError, error_response
from ..decorators import require_auth, require_permission


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
@require_permission("CREATE_SALE")
def record_sale_route():
    """
    Record a checkout.

    Body: {saleId, items: [{productId, quantity}, ...]}

    Requires: CREATE_SALE permission (pharmacist)
    """
    data = request.get_json(silent=True) or {}

    try:
        result = sales_service.record_sale(sale_id=data.get("saleId"), items=data.get("items"))
    except ValidationError as e:
        return error_response(e.message, 400)
    except NotFoundError as e:
        return error_response(e.message, 404, e.details)
    except ConsistencyError as e:
        return error_response(e.message, 409, e.details)

    return jsonify({
        "success": True,
        "message": "Sale recorded successfully",
        **result,
    }), 201


@sales_bp.get("/<sale_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_sale_route(sale_id: str):
    """Lines recorded under one sale id."""
    try:
        lines = sales_service.get_sale_lines(sale_id)
    except NotFoundError as e:
        return error_response(e.message, 404)

    return jsonify({"saleId": sale_id, "lines": lines, "count": len(lines)}), 200
