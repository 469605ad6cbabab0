# backend/pharmacy/services/products_service.py
"""
Products Service: the product half of the inventory ledger.

Every product owns exactly one StockLevel row. Insert creates both;
delete removes the product and everything that references it, in
dependency order, inside one transaction.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Product, StockLevel, SaleRecord, SaleLineItem, PurchaseRecord
from ..models.inventory import stock_id_for
from ..numeric import next_numeric_id, to_number

PRODUCT_MUTABLE_FIELDS = {"name", "sale_price"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _product_row(product: Product, stock: StockLevel | None) -> dict:
    row = product.to_dict()
    row["quantity"] = to_number(stock.quantity_available) if stock else 0
    return row


def next_product_id() -> str:
    """
    Max-plus-one over the numeric product ids.

    Ids stay strings; non-numeric ids (e.g. "AMOX-250") are ignored.
    """
    return next_numeric_id(pid for (pid,) in db.session.query(Product.product_id).all())


def get_product_or_404(product_id: str) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def list_products() -> dict:
    """All products with their current stock quantity, ordered by id."""
    rows = (
        db.session.query(Product, StockLevel)
        .outerjoin(StockLevel, StockLevel.product_id == Product.product_id)
        .order_by(Product.product_id.asc())
        .all()
    )
    items = [_product_row(p, s) for p, s in rows]
    return {"items": items, "count": len(items)}


def search_products(name: str | None) -> dict:
    """Case-insensitive substring match on product name."""
    term = (name or "").strip()
    query = (
        db.session.query(Product, StockLevel)
        .outerjoin(StockLevel, StockLevel.product_id == Product.product_id)
    )
    if term:
        query = query.filter(Product.name.ilike(f"%{term}%"))
    rows = query.order_by(Product.name.asc(), Product.product_id.asc()).all()
    items = [_product_row(p, s) for p, s in rows]
    return {"items": items, "count": len(items)}


def get_product(product_id: str) -> dict:
    product = get_product_or_404(product_id)
    stock = db.session.query(StockLevel).filter_by(product_id=product_id).first()
    return _product_row(product, stock)


def _new_product(product_id: str, patch: dict) -> tuple[Product, StockLevel]:
    p = Product(product_id=product_id, sale_price=0)
    apply_product_patch(p, patch)
    if p.sale_price is None:
        p.sale_price = 0

    stock = StockLevel(stock_id=stock_id_for(product_id), product_id=product_id, quantity_available=0)

    db.session.add(p)
    db.session.add(stock)
    return p, stock


def create_product(*, patch: dict) -> dict:
    """
    Insert a product and its zero-quantity stock row.

    Args:
        patch: validated fields (product_id optional, name, sale_price)

    Returns:
        Created product dict (quantity 0)

    Raises:
        ValidationError: If name is missing
        ConflictError: If the product id already exists
    """
    if not patch.get("name"):
        raise ValidationError("name is required")

    supplied_id = patch.get("product_id")
    if supplied_id and db.session.get(Product, supplied_id) is not None:
        raise ConflictError(f"Product {supplied_id} already exists")

    # A generated id can lose a race with a concurrent insert; regenerate once
    attempts = 1 if supplied_id else 2
    for attempt in range(attempts):
        product_id = supplied_id or next_product_id()
        p, stock = _new_product(product_id, patch)
        try:
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            if attempt == attempts - 1:
                raise ConflictError(f"Product {product_id} already exists")
            current_app.logger.warning("Generated product_id=%s already taken, retrying", product_id)

    current_app.logger.info("Product created product_id=%s name=%s", p.product_id, p.name)
    return _product_row(p, stock)


def update_product(*, product_id: str, patch: dict) -> dict:
    """
    Overwrite name and/or sale price. Stock is never touched here.

    Raises:
        NotFoundError: If the product does not exist
    """
    p = get_product_or_404(product_id)

    if "name" in patch and not patch["name"]:
        raise ValidationError("name cannot be blank")
    if "sale_price" in patch and patch["sale_price"] is None:
        patch = {**patch, "sale_price": 0}

    apply_product_patch(p, patch)
    db.session.commit()

    current_app.logger.info(
        "Product updated product_id=%s fields=%s", p.product_id, ",".join(sorted(patch.keys()))
    )
    stock = db.session.query(StockLevel).filter_by(product_id=product_id).first()
    return _product_row(p, stock)


def delete_product(*, product_id: str) -> None:
    """
    Delete a product and every row that references it.

    Order: sale line items, sale record, stock level, purchase records,
    then the product. All or nothing.

    Raises:
        NotFoundError: If the product does not exist
    """
    get_product_or_404(product_id)

    try:
        db.session.query(SaleLineItem).filter_by(product_id=product_id).delete()
        db.session.query(SaleRecord).filter_by(product_id=product_id).delete()
        db.session.query(StockLevel).filter_by(product_id=product_id).delete()
        db.session.query(PurchaseRecord).filter_by(product_id=product_id).delete()
        db.session.query(Product).filter_by(product_id=product_id).delete()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Product deleted product_id=%s", product_id)
