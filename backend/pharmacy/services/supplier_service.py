# Overview: Service-layer operations for suppliers.

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Supplier, PurchaseRecord
from ..numeric import next_numeric_id


def next_supplier_id() -> str:
    """Max-plus-one over the numeric supplier ids, as a string."""
    return next_numeric_id(sid for (sid,) in db.session.query(Supplier.supplier_id).all())


def list_suppliers() -> dict:
    suppliers = db.session.query(Supplier).order_by(Supplier.supplier_id.asc()).all()
    return {"items": [s.to_dict() for s in suppliers], "count": len(suppliers)}


def search_suppliers(q: str | None) -> dict:
    """Substring match on supplier id or name."""
    term = (q or "").strip()
    if not term:
        raise ValidationError("Search query is required")
    pattern = f"%{term}%"
    suppliers = (
        db.session.query(Supplier)
        .filter(or_(Supplier.supplier_id.ilike(pattern), Supplier.name.ilike(pattern)))
        .order_by(Supplier.supplier_id.asc())
        .all()
    )
    return {"items": [s.to_dict() for s in suppliers], "count": len(suppliers)}


def create_supplier(*, patch: dict) -> dict:
    if not patch.get("name"):
        raise ValidationError("name is required")

    supplier_id = patch.get("supplier_id") or next_supplier_id()
    if db.session.get(Supplier, supplier_id) is not None:
        raise ConflictError(f"Supplier {supplier_id} already exists")

    supplier = Supplier(supplier_id=supplier_id, name=patch["name"])
    db.session.add(supplier)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Supplier {supplier_id} already exists")

    current_app.logger.info("Supplier created supplier_id=%s", supplier_id)
    return supplier.to_dict()


def delete_supplier(*, supplier_id: str) -> None:
    """
    Delete a supplier. Purchase history keeps its rows with the supplier
    reference cleared.
    """
    supplier = db.session.get(Supplier, supplier_id)
    if not supplier:
        raise NotFoundError(f"Supplier {supplier_id} not found")

    try:
        db.session.query(PurchaseRecord).filter_by(supplier_id=supplier_id).update(
            {PurchaseRecord.supplier_id: None}
        )
        db.session.delete(supplier)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Supplier deleted supplier_id=%s", supplier_id)
