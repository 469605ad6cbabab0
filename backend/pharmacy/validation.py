from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


# Maximum price: 9,999,999,999.99 fits Numeric(12, 2)
MAX_PRICE = Decimal("9999999999.99")

# Column shapes: quantities Numeric(14, 3), money Numeric(12, 2)
QUANTITY_PRECISION = 14
QUANTITY_SCALE = 3
MONEY_PRECISION = 12
MONEY_SCALE = 2


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary),
      keyed by the JSON field name
    - aliases: JSON field name -> model column key (e.g. salePrice -> sale_price)
    - required_on_create: JSON fields required for POST
    """
    writable_fields: set[str]
    aliases: dict[str, str] = field(default_factory=dict)
    required_on_create: set[str] = field(default_factory=set)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def parse_decimal(name: str, value: Any) -> Decimal:
    """Accept ints, floats and numeric strings; reject bools, NaN and infinities."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValidationError(f"{name} must be a finite number")
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{name} must be a number")
        try:
            d = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{name} must be a number")
        if not d.is_finite():
            raise ValidationError(f"{name} must be a finite number")
        return d
    raise ValidationError(f"{name} must be a number")


def check_precision(name: str, value: Decimal, precision: int, scale: int) -> Decimal:
    """
    Reject values a Numeric(precision, scale) column would round or overflow.
    """
    maximum = Decimal(10) ** (precision - scale) - Decimal(10) ** -scale
    if abs(value) > maximum:
        raise ValidationError(f"{name} cannot exceed {maximum}")
    if value != value.quantize(Decimal(10) ** -scale):
        raise ValidationError(f"{name} allows at most {scale} decimal places")
    return value


def _coerce_value(name: str, col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise ValidationError(f"{name} must be an integer")

    if isinstance(coltype, Numeric):
        d = parse_decimal(name, value)
        if coltype.precision is not None and coltype.scale is not None:
            check_precision(name, d, coltype.precision, coltype.scale)
        return d

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{name} must be true or false")

    # Strings / Text; ids arrive as numbers from some clients
    if isinstance(coltype, (String, Text)):
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ValidationError(f"{name} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict keyed by model column key.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if policy.aliases.get(k, k) not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        key = policy.aliases.get(k, k)
        col = cols[key]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[key] = None
            continue

        val = _coerce_value(k, col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[key] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "sale_price" in patch and patch["sale_price"] is not None:
        price = patch["sale_price"]
        if price < 0:
            raise ValidationError("salePrice must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"salePrice cannot exceed {MAX_PRICE}")


def require_positive_quantity(name: str, value: Any) -> Decimal:
    if value is None:
        raise ValidationError(f"{name} is required")
    qty = parse_decimal(name, value)
    if qty <= 0:
        raise ValidationError(f"{name} must be > 0")
    return check_precision(name, qty, QUANTITY_PRECISION, QUANTITY_SCALE)


def require_money(name: str, value: Any) -> Decimal:
    """Non-negative amount that fits a Numeric(12, 2) column."""
    amount = parse_decimal(name, value)
    if amount < 0:
        raise ValidationError(f"{name} must be >= 0")
    return check_precision(name, amount, MONEY_PRECISION, MONEY_SCALE)


def require_text(name: str, value: Any, max_length: int = 64) -> str:
    if value is None or isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValidationError(f"{name} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{name} is required")
    if len(text) > max_length:
        raise ValidationError(f"{name} exceeds max length {max_length}")
    return text
