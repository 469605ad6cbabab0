"""
Sales ledger tests.

Oversells are rejected: a sale that would take any product below zero
stock raises ConsistencyError and writes nothing.
"""

from decimal import Decimal

import pytest

from pharmacy.errors import ConsistencyError, NotFoundError, ValidationError
from pharmacy.models import SaleLineItem, SaleRecord
from pharmacy.services import dashboard_service, inventory_service, products_service, sales_service


def _quantity(product_id):
    return products_service.get_product(product_id)["quantity"]


class TestRecordSale:

    def test_sale_without_stock_is_rejected_and_writes_nothing(self, db_session, make_product):
        make_product("Paracetamol", 10, product_id="P1")

        with pytest.raises(ConsistencyError) as exc_info:
            sales_service.record_sale(sale_id="S1", items=[{"productId": "P1", "quantity": 5}])

        assert exc_info.value.details["items"] == [
            {"productId": "P1", "requestedQuantity": 5, "quantityAvailable": 0}
        ]
        assert _quantity("P1") == 0
        assert db_session.query(SaleRecord).count() == 0
        assert db_session.query(SaleLineItem).count() == 0

    def test_total_sales_amount_across_products(self, db_session, make_product):
        make_product("P1", 10, product_id="P1", stock=10)
        make_product("P2", 20, product_id="P2", stock=10)

        result = sales_service.record_sale(
            sale_id="S1",
            items=[{"productId": "P1", "quantity": 3}, {"productId": "P2", "quantity": 2}],
        )

        assert result["totalAmount"] == 70
        assert dashboard_service.get_dashboard_stats()["totalSalesAmount"] == 70

    def test_sequential_sales_accumulate(self, db_session, make_product):
        make_product("Vitamin C", 3, product_id="P1", stock=20)

        for i, qty in enumerate([3, 5, 2]):
            sales_service.record_sale(sale_id=f"S{i}", items=[{"productId": "P1", "quantity": qty}])

        record = sales_service.get_sale_record("P1")
        assert record.quantity_sold == 10
        assert _quantity("P1") == 10

    def test_same_product_twice_in_one_sale(self, db_session, make_product):
        make_product("Bandage", 2, product_id="P1", stock=10)

        result = sales_service.record_sale(
            sale_id="S1",
            items=[{"productId": "P1", "quantity": 2}, {"productId": "P1", "quantity": 3}],
        )

        assert result["totalAmount"] == 10
        assert sales_service.get_sale_record("P1").quantity_sold == 5
        assert len(sales_service.get_sale_lines("S1")) == 2
        assert _quantity("P1") == 5

    def test_combined_lines_may_not_oversell(self, db_session, make_product):
        make_product("Bandage", 2, product_id="P1", stock=4)

        with pytest.raises(ConsistencyError):
            sales_service.record_sale(
                sale_id="S1",
                items=[{"productId": "P1", "quantity": 2}, {"productId": "P1", "quantity": 3}],
            )

        assert _quantity("P1") == 4

    def test_price_read_at_sale_time(self, db_session, make_product):
        make_product("Syrup", 10, product_id="P1", stock=10)
        sales_service.record_sale(sale_id="S1", items=[{"productId": "P1", "quantity": 1}])

        products_service.update_product(product_id="P1", patch={"sale_price": 12})
        sales_service.record_sale(sale_id="S2", items=[{"productId": "P1", "quantity": 1}])

        record = sales_service.get_sale_record("P1")
        assert record.sale_price == 12
        assert record.quantity_sold == 2
        assert sales_service.get_sale_lines("S1")[0]["unitPrice"] == 10
        assert sales_service.get_sale_lines("S2")[0]["unitPrice"] == 12

    def test_unknown_product_rolls_back_whole_batch(self, db_session, make_product):
        make_product("Syrup", 10, product_id="P1", stock=10)

        with pytest.raises(NotFoundError):
            sales_service.record_sale(
                sale_id="S1",
                items=[{"productId": "P1", "quantity": 1}, {"productId": "ghost", "quantity": 1}],
            )

        assert _quantity("P1") == 10
        assert db_session.query(SaleLineItem).count() == 0

    def test_fractional_quantities(self, db_session, make_product):
        make_product("Strip", 4, product_id="P1", stock=2)

        result = sales_service.record_sale(sale_id="S1", items=[{"productId": "P1", "quantity": 0.5}])

        assert result["totalAmount"] == 2
        assert _quantity("P1") == 1.5

    @pytest.mark.parametrize(
        "items",
        [
            None,
            [],
            [{"productId": "P1"}],
            [{"productId": "P1", "quantity": 0}],
            [{"productId": "P1", "quantity": -1}],
            [{"productId": "P1", "quantity": "abc"}],
            [{"productId": "P1", "quantity": True}],
            [{"quantity": 1}],
            ["P1"],
        ],
    )
    def test_invalid_items_rejected(self, db_session, make_product, items):
        make_product("Syrup", 10, product_id="P1", stock=10)

        with pytest.raises(ValidationError):
            sales_service.record_sale(sale_id="S1", items=items)

        assert _quantity("P1") == 10

    def test_sale_id_required(self, db_session, make_product):
        make_product("Syrup", 10, product_id="P1", stock=10)
        with pytest.raises(ValidationError):
            sales_service.record_sale(sale_id="  ", items=[{"productId": "P1", "quantity": 1}])


class TestPurchases:

    def test_purchase_raises_stock(self, db_session, make_product):
        make_product("Syrup", 10, product_id="P1")

        result = inventory_service.record_purchase(product_id="P1", quantity=8, purchase_price=6)

        assert result["quantityAvailable"] == 8
        assert result["purchase"]["purchasePrice"] == 6
        assert inventory_service.get_quantity_available("P1") == 8

    def test_purchase_unknown_product(self, db_session):
        with pytest.raises(NotFoundError):
            inventory_service.record_purchase(product_id="ghost", quantity=1)

    def test_purchase_unknown_supplier(self, db_session, make_product):
        make_product("Syrup", 10, product_id="P1")
        with pytest.raises(NotFoundError):
            inventory_service.record_purchase(product_id="P1", quantity=1, supplier_id="S9")
        assert _quantity("P1") == 0

    def test_negative_purchase_price_rejected(self, db_session, make_product):
        make_product("Syrup", 10, product_id="P1")
        with pytest.raises(ValidationError):
            inventory_service.record_purchase(product_id="P1", quantity=1, purchase_price=-1)


class TestQuantityPrecision:

    def test_sub_precision_quantity_rejected(self, db_session, make_product):
        make_product("Drops", 1, product_id="P1", stock=10)

        with pytest.raises(ValidationError, match="at most 3 decimal places"):
            sales_service.record_sale(sale_id="S1", items=[{"productId": "P1", "quantity": "0.0004"}])

        assert _quantity("P1") == 10
        assert db_session.query(SaleRecord).count() == 0

    def test_three_decimal_places_still_accounted(self, db_session, make_product):
        make_product("Drops", 1, product_id="P1", stock=10)

        for i in range(2):
            sales_service.record_sale(sale_id=f"S{i}", items=[{"productId": "P1", "quantity": "0.001"}])

        assert _quantity("P1") == 9.998
        assert sales_service.get_sale_record("P1").quantity_sold == Decimal("0.002")

    def test_quantity_above_column_range_rejected(self, db_session, make_product):
        make_product("Drops", 1, product_id="P1", stock=10)
        with pytest.raises(ValidationError, match="cannot exceed"):
            sales_service.record_sale(sale_id="S1", items=[{"productId": "P1", "quantity": "1e12"}])

    def test_purchase_precision_checked(self, db_session, make_product):
        make_product("Drops", 1, product_id="P1")

        with pytest.raises(ValidationError):
            inventory_service.record_purchase(product_id="P1", quantity="0.0001")
        with pytest.raises(ValidationError, match="at most 2 decimal places"):
            inventory_service.record_purchase(product_id="P1", quantity=1, purchase_price="1.005")

        assert _quantity("P1") == 0
