# Overview: Flask API routes for supplier operations.

from flask import Blueprint, request, jsonify

from ..services import supplier_service
from ..models import Supplier
from ..errors import ConflictError, NotFoundError, ValidationError, error_response
from ..validation import ModelValidationPolicy, validate_payload
from ..decorators import require_auth, require_permission

SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={"supplierId", "name"},
    aliases={"supplierId": "supplier_id"},
    required_on_create={"name"},
)

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_suppliers():
    return jsonify(supplier_service.list_suppliers())


@suppliers_bp.get("/search")
@require_auth
@require_permission("VIEW_INVENTORY")
def search_suppliers():
    """Query params: q - substring of supplier id or name (required)."""
    try:
        return jsonify(supplier_service.search_suppliers(request.args.get("q")))
    except ValidationError as e:
        return error_response(e.message, 400)


@suppliers_bp.post("")
@require_auth
@require_permission("MANAGE_SUPPLIERS")
def create_supplier_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=False)
        created = supplier_service.create_supplier(patch=patch)
    except ValidationError as e:
        return error_response(e.message, 400)
    except ConflictError as e:
        return error_response(e.message, 409)

    return jsonify({
        "success": True,
        "message": "Supplier added successfully",
        "supplierId": created["supplierId"],
        "supplier": created,
    }), 201


@suppliers_bp.delete("/<supplier_id>")
@require_auth
@require_permission("MANAGE_SUPPLIERS")
def delete_supplier_route(supplier_id: str):
    try:
        supplier_service.delete_supplier(supplier_id=supplier_id)
    except NotFoundError as e:
        return error_response(e.message, 404)

    return jsonify({"success": True, "message": "Supplier deleted successfully"}), 200
