# Overview: Read-only dashboard aggregates over products, stock and sales.

from __future__ import annotations

from decimal import Decimal

from flask import current_app
from sqlalchemy import case, func, literal_column

from ..extensions import db
from ..models import Product, StockLevel, SaleRecord, Supplier, User
from ..numeric import as_decimal, to_number

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
MEDIUM_STOCK = "Medium Stock"
WELL_STOCKED = "Well Stocked"

STOCK_BUCKETS = (OUT_OF_STOCK, LOW_STOCK, MEDIUM_STOCK, WELL_STOCKED)

MEDIUM_STOCK_LIMIT = 50
TOP_PRODUCTS_LIMIT = 5
CENTS = Decimal("0.01")


def _low_stock_threshold() -> int:
    return current_app.config.get("LOW_STOCK_THRESHOLD", 10)


def stock_bucket_expr(threshold: int):
    """
    CASE expression assigning every stock row to exactly one bucket.

    Negative balances (possible only in legacy data) count as out of stock.
    """
    qty = func.coalesce(StockLevel.quantity_available, 0)
    return case(
        (qty <= 0, OUT_OF_STOCK),
        (qty < threshold, LOW_STOCK),
        (qty < MEDIUM_STOCK_LIMIT, MEDIUM_STOCK),
        else_=WELL_STOCKED,
    )


def get_stock_distribution(threshold: int | None = None) -> list[dict]:
    threshold = _low_stock_threshold() if threshold is None else threshold
    bucket = stock_bucket_expr(threshold)
    rows = (
        db.session.query(bucket.label("category"), func.count(StockLevel.stock_id))
        .group_by(literal_column("category"))
        .all()
    )
    counts = {category: int(count) for category, count in rows}
    return [{"category": name, "count": counts.get(name, 0)} for name in STOCK_BUCKETS]


def get_top_products(limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    rows = (
        db.session.query(Product.name, SaleRecord.quantity_sold)
        .join(Product, Product.product_id == SaleRecord.product_id)
        .order_by(SaleRecord.quantity_sold.desc(), Product.name.asc())
        .limit(limit)
        .all()
    )
    return [{"name": name, "sales": to_number(qty) or 0} for name, qty in rows]


def get_dashboard_stats() -> dict:
    threshold = _low_stock_threshold()

    total_products = db.session.query(func.count(Product.product_id)).scalar() or 0
    total_users = db.session.query(func.count(User.id)).scalar() or 0
    total_suppliers = db.session.query(func.count(Supplier.supplier_id)).scalar() or 0

    low_stock_items = (
        db.session.query(func.count(StockLevel.stock_id))
        .filter(func.coalesce(StockLevel.quantity_available, 0) < threshold)
        .scalar()
    ) or 0

    total_sales_amount = db.session.query(
        func.coalesce(
            func.sum(
                func.coalesce(SaleRecord.quantity_sold, 0) * func.coalesce(SaleRecord.sale_price, 0)
            ),
            0,
        )
    ).scalar()

    inventory_value = (
        db.session.query(
            func.coalesce(
                func.sum(
                    func.coalesce(StockLevel.quantity_available, 0) * func.coalesce(Product.sale_price, 0)
                ),
                0,
            )
        )
        .select_from(StockLevel)
        .join(Product, Product.product_id == StockLevel.product_id)
        .scalar()
    )

    return {
        "totalProducts": int(total_products),
        "totalUsers": int(total_users),
        "totalSuppliers": int(total_suppliers),
        "lowStockItems": int(low_stock_items),
        "totalSalesAmount": _money(total_sales_amount),
        "inventoryValue": _money(inventory_value),
        "topProducts": get_top_products(),
        "stockDistribution": get_stock_distribution(threshold),
    }


def _money(value):
    if value is None:
        return 0
    # SQLite returns REAL for products of NUMERIC columns
    return to_number(as_decimal(value).quantize(CENTS))
