from __future__ import annotations

from ..extensions import db
from ..numeric import to_number
from ..time_utils import to_utc_z

# Quantities allow fractional units (e.g., 0.5 of a strip); prices are money.
QUANTITY = db.Numeric(14, 3)
MONEY = db.Numeric(12, 2)


def stock_id_for(product_id: str) -> str:
    return f"STK{product_id}"


class Product(db.Model):
    """
    Product master data.

    product_id is a string identity, either supplied by the caller or
    generated as max-plus-one over the numeric ids already in use.

    sale_price may be NULL; every reader treats NULL as 0.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "name"),
    )

    product_id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    sale_price = db.Column(MONEY, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    stock = db.relationship("StockLevel", back_populates="product", uselist=False)

    def __repr__(self) -> str:
        return f"<Product product_id={self.product_id!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "salePrice": to_number(self.sale_price) or 0,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class StockLevel(db.Model):
    """
    Current available quantity, one row per product.

    Created with the product (quantity 0), raised by purchases, lowered by
    sales, deleted with the product.
    """
    __tablename__ = "stock_levels"

    stock_id = db.Column(db.String(80), primary_key=True)
    product_id = db.Column(
        db.String(64),
        db.ForeignKey("products.product_id"),
        nullable=False,
        unique=True,
        index=True,
    )
    quantity_available = db.Column(QUANTITY, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    product = db.relationship("Product", back_populates="stock")

    def __repr__(self) -> str:
        return f"<StockLevel product_id={self.product_id!r} qty={self.quantity_available}>"

    def to_dict(self) -> dict:
        return {
            "stockId": self.stock_id,
            "productId": self.product_id,
            "quantityAvailable": to_number(self.quantity_available),
            "updatedAt": to_utc_z(self.updated_at),
        }


class PurchaseRecord(db.Model):
    """Incoming stock from a supplier; each row raised quantity_available once."""
    __tablename__ = "purchase_records"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.String(64), db.ForeignKey("products.product_id"), nullable=False, index=True)
    supplier_id = db.Column(db.String(64), db.ForeignKey("suppliers.supplier_id"), nullable=True, index=True)

    quantity = db.Column(QUANTITY, nullable=False)
    purchase_price = db.Column(MONEY, nullable=True)

    purchased_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    product = db.relationship("Product")
    supplier = db.relationship("Supplier")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "supplierId": self.supplier_id,
            "quantity": to_number(self.quantity),
            "purchasePrice": to_number(self.purchase_price),
            "purchasedAt": to_utc_z(self.purchased_at),
        }


class Supplier(db.Model):
    __tablename__ = "suppliers"

    supplier_id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "supplierId": self.supplier_id,
            "name": self.name,
        }
