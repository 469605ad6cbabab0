"""
Permission codes and the role -> permission mapping.

Roles follow the pharmacy counter split:
- pharmacist: look up stock, sell, limited reports
- admin: everything except ringing up sales
"""

from .models.auth import ROLE_ADMIN, ROLE_PHARMACIST

# Each permission is defined as: (code, description)
PERMISSION_DEFINITIONS = [
    ("VIEW_INVENTORY", "View products, stock levels and suppliers"),
    ("VIEW_DASHBOARD", "View dashboard statistics"),
    ("MANAGE_PRODUCTS", "Insert, update and delete products"),
    ("RECEIVE_STOCK", "Record purchases (incoming stock)"),
    ("CREATE_SALE", "Record sales"),
    ("MANAGE_SUPPLIERS", "Add and delete suppliers"),
    ("MANAGE_USERS", "Add, list and delete users"),
    ("VIEW_LIMITED_REPORTS", "Sales, stock and low-stock reports"),
    ("VIEW_FULL_REPORTS", "Profit, inventory value and purchase history reports"),
]

ROLE_PERMISSIONS = {
    ROLE_ADMIN: {
        "VIEW_INVENTORY",
        "VIEW_DASHBOARD",
        "MANAGE_PRODUCTS",
        "RECEIVE_STOCK",
        "MANAGE_SUPPLIERS",
        "MANAGE_USERS",
        "VIEW_LIMITED_REPORTS",
        "VIEW_FULL_REPORTS",
    },
    ROLE_PHARMACIST: {
        "VIEW_INVENTORY",
        "VIEW_DASHBOARD",
        "CREATE_SALE",
        "VIEW_LIMITED_REPORTS",
    },
}


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_role_permissions(role: str) -> set[str]:
    return ROLE_PERMISSIONS.get(role, set())


def role_has_permission(role: str, code: str) -> bool:
    return code in get_role_permissions(role)
