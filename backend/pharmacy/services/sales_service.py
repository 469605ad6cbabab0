"""
Sales Service: recording a checkout against the inventory ledger.

A checkout (saleId + items) is one transaction. For each line, in order:
read the current sale price, append a SaleLineItem, accumulate the
product's SaleRecord, and decrement its StockLevel. Oversells are
rejected before anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..errors import ConsistencyError, NotFoundError, ValidationError
from ..models import Product, StockLevel, SaleRecord, SaleLineItem
from ..numeric import ZERO, as_decimal, to_number
from ..validation import require_positive_quantity, require_text
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry


@dataclass(frozen=True)
class SaleItem:
    product_id: str
    quantity: Decimal


def parse_sale_items(items) -> list[SaleItem]:
    """Validate the raw items list from a request body."""
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    parsed = []
    for i, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{i}] must be an object")
        product_id = require_text(f"items[{i}].productId", raw.get("productId"))
        quantity = require_positive_quantity(f"items[{i}].quantity", raw.get("quantity"))
        parsed.append(SaleItem(product_id=product_id, quantity=quantity))
    return parsed


def _requested_by_product(items: list[SaleItem]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for item in items:
        totals[item.product_id] = totals.get(item.product_id, ZERO) + item.quantity
    return totals


def _lock_stock_rows(product_ids) -> dict[str, StockLevel]:
    # Sorted so two checkouts touching the same products lock in the same order
    rows = lock_for_update(
        db.session.query(StockLevel)
        .filter(StockLevel.product_id.in_(sorted(product_ids)))
        .order_by(StockLevel.product_id.asc())
    ).all()
    return {row.product_id: row for row in rows}


def _validate_on_hand(requested: dict[str, Decimal], stock_rows: dict[str, StockLevel]) -> None:
    insufficient = []
    for product_id, qty in requested.items():
        on_hand = as_decimal(stock_rows[product_id].quantity_available)
        if on_hand < qty:
            insufficient.append({
                "productId": product_id,
                "requestedQuantity": to_number(qty),
                "quantityAvailable": to_number(on_hand),
            })

    if insufficient:
        raise ConsistencyError(
            "Insufficient stock to record sale",
            details={"items": insufficient},
        )


def _apply_line(sale_id: str, item: SaleItem, product: Product, stock: StockLevel) -> Decimal:
    price = as_decimal(product.sale_price)

    db.session.add(SaleLineItem(
        sale_id=sale_id,
        product_id=item.product_id,
        quantity=item.quantity,
        unit_price=price,
    ))

    record = db.session.get(SaleRecord, item.product_id)
    if record is None:
        record = SaleRecord(product_id=item.product_id, quantity_sold=item.quantity, sale_price=price)
        db.session.add(record)
        # Later lines for the same product in this batch must see this row
        db.session.flush()
    else:
        record.quantity_sold = as_decimal(record.quantity_sold) + item.quantity
        record.sale_price = price

    stock.quantity_available = as_decimal(stock.quantity_available) - item.quantity
    return price * item.quantity


def record_sale(*, sale_id, items) -> dict:
    """
    Record one checkout.

    Args:
        sale_id: caller-supplied invoice identifier (not checked for reuse)
        items: list of {productId, quantity}

    Returns:
        {"saleId", "totalAmount", "lines"}

    Raises:
        ValidationError: malformed sale id, items or quantities
        NotFoundError: a product (or its stock row) does not exist
        ConsistencyError: a product would go below zero stock
    """
    sale_id = require_text("saleId", sale_id)
    parsed = parse_sale_items(items)
    requested = _requested_by_product(parsed)

    def _op():
        begin_write_transaction()

        products = {
            p.product_id: p
            for p in db.session.query(Product).filter(Product.product_id.in_(requested.keys())).all()
        }
        missing = sorted(pid for pid in requested if pid not in products)
        if missing:
            raise NotFoundError(f"Product not found: {', '.join(missing)}", details={"productIds": missing})

        stock_rows = _lock_stock_rows(requested.keys())
        missing_stock = sorted(pid for pid in requested if pid not in stock_rows)
        if missing_stock:
            raise NotFoundError(
                f"Stock level not found: {', '.join(missing_stock)}",
                details={"productIds": missing_stock},
            )

        _validate_on_hand(requested, stock_rows)

        total = ZERO
        lines = []
        for item in parsed:
            line_total = _apply_line(sale_id, item, products[item.product_id], stock_rows[item.product_id])
            total += line_total
            lines.append({
                "productId": item.product_id,
                "quantity": to_number(item.quantity),
                "unitPrice": to_number(as_decimal(products[item.product_id].sale_price)),
                "lineTotal": to_number(line_total),
            })

        db.session.commit()
        return {"saleId": sale_id, "totalAmount": to_number(total), "lines": lines}

    try:
        result = run_with_retry(_op, attempts=5)
    except ConsistencyError as exc:
        current_app.logger.warning("Sale %s rejected: %s %s", sale_id, exc.message, exc.details)
        raise

    current_app.logger.info(
        "Sale recorded sale_id=%s lines=%d total=%s", sale_id, len(parsed), result["totalAmount"]
    )
    return result


def get_sale_lines(sale_id: str) -> list[dict]:
    sale_id = require_text("saleId", sale_id)
    lines = (
        db.session.query(SaleLineItem)
        .filter_by(sale_id=sale_id)
        .order_by(SaleLineItem.id.asc())
        .all()
    )
    if not lines:
        raise NotFoundError(f"Sale {sale_id} not found")
    return [line.to_dict() for line in lines]


def get_sale_record(product_id: str) -> SaleRecord:
    record = db.session.get(SaleRecord, product_id)
    if not record:
        raise NotFoundError(f"Sale record for product {product_id} not found")
    return record
