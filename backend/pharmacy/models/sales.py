from __future__ import annotations

from ..extensions import db
from ..numeric import to_number
from ..time_utils import to_utc_z
from .inventory import MONEY, QUANTITY


class SaleRecord(db.Model):
    """
    Running sales total per product (not a per-transaction ledger).

    quantity_sold only ever grows; sale_price is overwritten with the price
    in effect at the most recent sale.
    """
    __tablename__ = "sale_records"

    product_id = db.Column(db.String(64), db.ForeignKey("products.product_id"), primary_key=True)
    quantity_sold = db.Column(QUANTITY, nullable=False, default=0)
    sale_price = db.Column(MONEY, nullable=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "quantitySold": to_number(self.quantity_sold),
            "salePrice": to_number(self.sale_price) or 0,
            "updatedAt": to_utc_z(self.updated_at),
        }


class SaleLineItem(db.Model):
    """
    One row per (sale, product) line entered at checkout.

    sale_id is the caller-supplied invoice identifier and is not unique:
    every line of the same checkout shares it.
    """
    __tablename__ = "sale_line_items"
    __table_args__ = (
        db.Index("ix_sale_line_items_sale_product", "sale_id", "product_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.String(64), nullable=False, index=True)
    product_id = db.Column(db.String(64), db.ForeignKey("products.product_id"), nullable=False, index=True)

    # Per-line snapshot; SaleRecord only keeps the latest price
    quantity = db.Column(QUANTITY, nullable=False)
    unit_price = db.Column(MONEY, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "saleId": self.sale_id,
            "productId": self.product_id,
            "quantity": to_number(self.quantity),
            "unitPrice": to_number(self.unit_price),
            "createdAt": to_utc_z(self.created_at),
        }
