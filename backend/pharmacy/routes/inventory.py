# Overview: Flask API routes for stock levels and purchases.

from flask import Blueprint, request, jsonify

from ..services import inventory_service
from ..errors import NotFoundError, ValidationError, error_response
from ..numeric import to_number
from ..validation import require_money, require_positive_quantity, require_text
from ..decorators import require_auth, require_permission

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")


@inventory_bp.get("/stock/<product_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_stock_route(product_id: str):
    try:
        stock = inventory_service.get_stock_level(product_id)
    except NotFoundError as e:
        return error_response(e.message, 404)
    return jsonify(stock.to_dict()), 200


@inventory_bp.post("/purchases")
@require_auth
@require_permission("RECEIVE_STOCK")
def record_purchase_route():
    """
    Receive stock for a product.

    Body: {productId, quantity, purchasePrice?, supplierId?}
    """
    data = request.get_json(silent=True) or {}

    try:
        product_id = require_text("productId", data.get("productId"))
        quantity = require_positive_quantity("quantity", data.get("quantity"))

        purchase_price = data.get("purchasePrice")
        if purchase_price is not None:
            purchase_price = require_money("purchasePrice", purchase_price)

        supplier_id = data.get("supplierId")
        if supplier_id is not None:
            supplier_id = require_text("supplierId", supplier_id)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        result = inventory_service.record_purchase(
            product_id=product_id,
            quantity=quantity,
            purchase_price=purchase_price,
            supplier_id=supplier_id,
        )
    except ValidationError as e:
        return error_response(e.message, 400)
    except NotFoundError as e:
        return error_response(e.message, 404)

    return jsonify({
        "success": True,
        "message": "Purchase recorded successfully",
        "quantity": to_number(quantity),
        **result,
    }), 201
