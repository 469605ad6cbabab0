# Overview: Service-layer operations for reporting; tabular reports over the ledger.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import ValidationError
from ..models import Product, StockLevel, SaleRecord, PurchaseRecord, Supplier
from ..numeric import as_decimal, to_number
from ..time_utils import to_utc_z

LIMITED_REPORTS = ("sales", "stock", "low-stock")
FULL_REPORTS = ("profit", "inventory-value", "purchase-history")
REPORT_TYPES = LIMITED_REPORTS + FULL_REPORTS


def required_permission(report_type: str) -> str:
    if report_type in LIMITED_REPORTS:
        return "VIEW_LIMITED_REPORTS"
    if report_type in FULL_REPORTS:
        return "VIEW_FULL_REPORTS"
    raise ValidationError(f"Invalid report type: {report_type}")


def sales_report() -> list[dict]:
    rows = (
        db.session.query(SaleRecord, Product)
        .join(Product, Product.product_id == SaleRecord.product_id)
        .order_by(Product.product_id.asc())
        .all()
    )
    out = []
    for record, product in rows:
        qty = as_decimal(record.quantity_sold)
        price = as_decimal(record.sale_price)
        out.append({
            "productId": product.product_id,
            "productName": product.name,
            "quantitySold": to_number(qty),
            "unitPrice": to_number(price),
            "totalAmount": to_number(qty * price),
        })
    return out


def _stock_rows():
    return (
        db.session.query(StockLevel, Product)
        .join(Product, Product.product_id == StockLevel.product_id)
    )


def stock_report() -> list[dict]:
    rows = _stock_rows().order_by(Product.product_id.asc()).all()
    return [
        {
            "productId": product.product_id,
            "productName": product.name,
            "quantityAvailable": to_number(as_decimal(stock.quantity_available)),
            "price": to_number(as_decimal(product.sale_price)),
        }
        for stock, product in rows
    ]


def low_stock_report(threshold: int | None = None) -> list[dict]:
    if threshold is None:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    rows = (
        _stock_rows()
        .filter(StockLevel.quantity_available < threshold)
        .order_by(StockLevel.quantity_available.asc(), Product.product_id.asc())
        .all()
    )
    return [
        {
            "productId": product.product_id,
            "productName": product.name,
            "quantityAvailable": to_number(as_decimal(stock.quantity_available)),
        }
        for stock, product in rows
    ]


def inventory_value_report() -> list[dict]:
    rows = _stock_rows().order_by(Product.product_id.asc()).all()
    out = []
    for stock, product in rows:
        qty = as_decimal(stock.quantity_available)
        price = as_decimal(product.sale_price)
        out.append({
            "productId": product.product_id,
            "productName": product.name,
            "quantity": to_number(qty),
            "unitPrice": to_number(price),
            "totalValue": to_number(qty * price),
        })
    return out


def _latest_purchase_prices() -> dict[str, object]:
    prices: dict[str, object] = {}
    rows = (
        db.session.query(PurchaseRecord.product_id, PurchaseRecord.purchase_price)
        .filter(PurchaseRecord.purchase_price.isnot(None))
        .order_by(PurchaseRecord.purchased_at.asc(), PurchaseRecord.id.asc())
        .all()
    )
    for product_id, price in rows:
        prices[product_id] = price
    return prices


def profit_report() -> list[dict]:
    """Per-product profit: quantity sold x (latest sale price - latest purchase price)."""
    purchase_prices = _latest_purchase_prices()
    rows = (
        db.session.query(SaleRecord, Product)
        .join(Product, Product.product_id == SaleRecord.product_id)
        .order_by(Product.product_id.asc())
        .all()
    )
    out = []
    for record, product in rows:
        qty = as_decimal(record.quantity_sold)
        sale_price = as_decimal(record.sale_price)
        purchase_price = as_decimal(purchase_prices.get(product.product_id))
        out.append({
            "productId": product.product_id,
            "productName": product.name,
            "quantitySold": to_number(qty),
            "salePrice": to_number(sale_price),
            "purchasePrice": to_number(purchase_price),
            "profit": to_number(qty * (sale_price - purchase_price)),
        })
    return out


def purchase_history_report() -> list[dict]:
    rows = (
        db.session.query(PurchaseRecord, Product, Supplier)
        .join(Product, Product.product_id == PurchaseRecord.product_id)
        .outerjoin(Supplier, Supplier.supplier_id == PurchaseRecord.supplier_id)
        .order_by(PurchaseRecord.purchased_at.desc(), PurchaseRecord.id.desc())
        .all()
    )
    return [
        {
            "id": purchase.id,
            "productId": product.product_id,
            "productName": product.name,
            "supplierId": purchase.supplier_id,
            "supplierName": supplier.name if supplier else None,
            "quantity": to_number(purchase.quantity),
            "purchasePrice": to_number(purchase.purchase_price),
            "purchasedAt": to_utc_z(purchase.purchased_at),
        }
        for purchase, product, supplier in rows
    ]


REPORT_BUILDERS = {
    "sales": sales_report,
    "stock": stock_report,
    "low-stock": low_stock_report,
    "profit": profit_report,
    "inventory-value": inventory_value_report,
    "purchase-history": purchase_history_report,
}


def get_report(report_type: str) -> dict:
    builder = REPORT_BUILDERS.get(report_type)
    if builder is None:
        raise ValidationError(f"Invalid report type: {report_type}")
    rows = builder()
    return {"reportType": report_type, "rows": rows, "count": len(rows)}
