# Overview: Service-layer operations for stock levels and incoming purchases.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import NotFoundError
from ..models import Product, StockLevel, PurchaseRecord, Supplier
from ..models.inventory import stock_id_for
from ..numeric import to_number
from ..validation import require_money, require_positive_quantity
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry


def get_stock_level(product_id: str) -> StockLevel:
    stock = db.session.query(StockLevel).filter_by(product_id=product_id).first()
    if not stock:
        raise NotFoundError(f"Stock level for product {product_id} not found")
    return stock


def get_quantity_available(product_id: str):
    return get_stock_level(product_id).quantity_available


def record_purchase(
    *,
    product_id: str,
    quantity,
    purchase_price=None,
    supplier_id: str | None = None,
) -> dict:
    """
    Receive stock: append a PurchaseRecord and raise quantity_available.

    The stock row is locked for the increment, the same way a sale locks
    it for the decrement.

    Raises:
        ValidationError: quantity not > 0, or a value the columns cannot hold
        NotFoundError: If the product or supplier does not exist
    """
    quantity = require_positive_quantity("quantity", quantity)
    if purchase_price is not None:
        purchase_price = require_money("purchasePrice", purchase_price)

    def _op():
        begin_write_transaction()
        if not db.session.get(Product, product_id):
            raise NotFoundError(f"Product {product_id} not found")
        if supplier_id is not None and not db.session.get(Supplier, supplier_id):
            raise NotFoundError(f"Supplier {supplier_id} not found")

        stock = lock_for_update(
            db.session.query(StockLevel).filter_by(product_id=product_id)
        ).first()
        if stock is None:
            # Products created outside the ledger may lack a stock row
            stock = StockLevel(stock_id=stock_id_for(product_id), product_id=product_id, quantity_available=0)
            db.session.add(stock)

        stock.quantity_available = (stock.quantity_available or 0) + quantity

        purchase = PurchaseRecord(
            product_id=product_id,
            supplier_id=supplier_id,
            quantity=quantity,
            purchase_price=purchase_price,
        )
        db.session.add(purchase)
        db.session.commit()

        current_app.logger.info(
            "Purchase recorded product_id=%s quantity=%s supplier_id=%s",
            product_id, quantity, supplier_id,
        )
        return {
            "purchase": purchase.to_dict(),
            "quantityAvailable": to_number(stock.quantity_available),
        }

    return run_with_retry(_op)
