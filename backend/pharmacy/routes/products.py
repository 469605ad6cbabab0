# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/pharmacy/routes/products.py
"""
Product management routes.

SECURITY: All routes require authentication.
- Read operations require VIEW_INVENTORY permission
- Write operations require MANAGE_PRODUCTS permission
"""
from flask import Blueprint, request, jsonify

from ..services import products_service
from ..models import Product
from ..errors import ConflictError, NotFoundError, ValidationError, error_response
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
)
from ..decorators import require_auth, require_permission

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"productId", "name", "salePrice"},
    aliases={"productId": "product_id", "salePrice": "sale_price"},
    required_on_create={"name"},
)

# The id comes from the URL on update; a body productId is ignored if it matches
PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "salePrice"},
    aliases={"salePrice": "sale_price"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_products():
    """List all products with their available quantity."""
    return jsonify(products_service.list_products())


@products_bp.get("/search")
@require_auth
@require_permission("VIEW_INVENTORY")
def search_products():
    """
    Search products by name.

    Query params:
    - name: str (optional) - substring of the product name
    """
    return jsonify(products_service.search_products(request.args.get("name")))


@products_bp.get("/<product_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_product(product_id: str):
    try:
        return jsonify(products_service.get_product(product_id))
    except NotFoundError as e:
        return error_response(e.message, 404)


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Insert a new product with zero stock.

    Body: {productId?, name, salePrice?}. Without productId the next
    numeric id is generated.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_CREATE_POLICY, partial=False)
        enforce_rules_product(patch)  # Handles price validation including max check
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        created = products_service.create_product(patch=patch)
    except ConflictError as e:
        return error_response(e.message, 409)
    except ValidationError as e:
        return error_response(e.message, 400)

    return jsonify({
        "success": True,
        "message": "Product inserted successfully",
        "productId": created["productId"],
        "product": created,
    }), 201


@products_bp.put("/<product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: str):
    """Update a product's name and/or sale price."""
    payload = dict(request.get_json(silent=True) or {})
    if str(payload.get("productId", product_id)) == product_id:
        payload.pop("productId", None)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except NotFoundError as e:
        return error_response(e.message, 404)
    except ValidationError as e:
        return error_response(e.message, 400)

    return jsonify({
        "success": True,
        "message": "Product updated successfully",
        "product": updated,
    }), 200


@products_bp.delete("/<product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: str):
    """Delete a product together with its stock and sales rows."""
    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError as e:
        return error_response(e.message, 404)

    return jsonify({"success": True, "message": "Product deleted successfully"}), 200
