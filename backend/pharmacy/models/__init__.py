from .inventory import Product, StockLevel, PurchaseRecord, Supplier
from .sales import SaleRecord, SaleLineItem
from .auth import User, SessionToken

__all__ = [
    'Product', 'StockLevel', 'PurchaseRecord', 'Supplier',
    'SaleRecord', 'SaleLineItem',
    'User', 'SessionToken',
]
