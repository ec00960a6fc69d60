"""Tests for the Product stock rules: line acceptance, reservation, shipment."""

from decimal import Decimal

import pytest
from protean.exceptions import InvalidStateError, ValidationError
from wholesale.product.product import Product


def _product(**overrides):
    defaults = {"reference": 1, "name": "Chai", "category_code": 1, "units_in_stock": 10}
    defaults.update(overrides)
    return Product(**defaults)


class TestProductDefaults:
    def test_field_defaults(self):
        product = Product(name="Chang", category_code=1)
        assert product.unit_price == Decimal("10")
        assert product.quantity_per_unit == "Box of 12"
        assert product.units_in_stock == 0
        assert product.units_on_order == 0
        assert product.reorder_level == 0
        assert product.unavailable is False
        assert product.supplier == 1

    def test_explicit_values_override_defaults(self):
        product = Product(name="Chang", category_code=1, unit_price=Decimal("19.00"), quantity_per_unit="24 - 12 oz bottles")
        assert product.unit_price == Decimal("19.00")
        assert product.quantity_per_unit == "24 - 12 oz bottles"

    def test_category_is_required(self):
        with pytest.raises(ValidationError) as exc:
            Product(name="Chang")
        assert "category_code" in exc.value.messages

    def test_name_is_required(self):
        with pytest.raises(ValidationError) as exc:
            Product(category_code=1)
        assert "name" in exc.value.messages


class TestAssertOrderable:
    def test_accepts_quantity_up_to_stock(self):
        _product().assert_orderable(10)

    def test_refuses_unavailable_product(self):
        with pytest.raises(InvalidStateError) as exc:
            _product(unavailable=True).assert_orderable(1)
        assert exc.value.args[0] == {"product": ["Product unavailable"]}

    def test_counts_units_already_on_order(self):
        product = _product(units_on_order=5)
        product.assert_orderable(5)
        with pytest.raises(InvalidStateError) as exc:
            product.assert_orderable(6)
        assert exc.value.args[0]["quantity"] == ["Insufficient stock: 10 in stock, 5 on order, 6 requested"]

    def test_unavailability_is_reported_before_stock(self):
        with pytest.raises(InvalidStateError) as exc:
            _product(unavailable=True, units_in_stock=0).assert_orderable(1)
        assert "product" in exc.value.args[0]


class TestReserve:
    def test_increments_units_on_order(self):
        product = _product()
        product.reserve(4)
        product.reserve(3)
        assert product.units_on_order == 7
        assert product.units_in_stock == 10

    def test_refuses_overcommit_and_leaves_counters(self):
        product = _product(units_on_order=8)
        with pytest.raises(InvalidStateError):
            product.reserve(3)
        assert product.units_on_order == 8

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_refuses_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError):
            _product().reserve(quantity)


class TestShip:
    def test_decrements_both_counters(self):
        product = _product(units_on_order=6)
        product.ship(6)
        assert product.units_in_stock == 4
        assert product.units_on_order == 0

    def test_stock_may_go_negative(self):
        product = _product(units_in_stock=2, units_on_order=5)
        product.ship(5)
        assert product.units_in_stock == -3
        assert product.units_on_order == 0


class TestNeedsReorder:
    def test_below_reorder_level(self):
        assert _product(units_on_order=8, reorder_level=2).needs_reorder is True

    def test_above_reorder_level(self):
        assert _product(units_on_order=2, reorder_level=5).needs_reorder is False
