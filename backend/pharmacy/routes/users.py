# Overview: Flask API routes for user management (admin only).

from flask import Blueprint, request, jsonify, g

from ..services import auth_service
from ..errors import ConflictError, NotFoundError, ValidationError, error_response
from ..decorators import require_auth, require_permission

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("MANAGE_USERS")
def list_users():
    return jsonify(auth_service.list_users())


@users_bp.post("")
@require_auth
@require_permission("MANAGE_USERS")
def create_user_route():
    """Body: {username, password, role}"""
    data = request.get_json(silent=True) or {}

    try:
        user = auth_service.create_user(
            username=data.get("username"),
            password=data.get("password"),
            role=data.get("role"),
        )
    except ValidationError as e:
        return error_response(e.message, 400)
    except ConflictError as e:
        return error_response(e.message, 409)

    return jsonify({
        "success": True,
        "message": "User added successfully",
        "userId": user.id,
        "user": user.to_dict(),
    }), 201


@users_bp.delete("/<username>")
@require_auth
@require_permission("MANAGE_USERS")
def delete_user_route(username: str):
    try:
        auth_service.delete_user(username, acting_user_id=g.current_user.id)
    except NotFoundError as e:
        return error_response(e.message, 404)
    except ConflictError as e:
        return error_response(e.message, 409)

    return jsonify({"success": True, "message": "User deleted successfully"}), 200
