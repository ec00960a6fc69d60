"""Product aggregate root.

Stock Model:
    units_in_stock: physical count in the warehouse
    units_on_order: committed to lines of open (unshipped) orders

On-order units are not deducted from stock until shipment, so a new line is
accepted only while ``units_on_order + quantity <= units_in_stock``. Shipment
subtracts the shipped quantity from both counters and may take stock below
zero if it was adjusted downwards after the lines were taken.
"""

import decimal

from protean.exceptions import InvalidStateError, ValidationError
from protean.fields import Auto, Boolean, Decimal, Integer, String

from wholesale.domain import wholesale

DEFAULT_UNIT_PRICE = decimal.Decimal("10")
DEFAULT_QUANTITY_PER_UNIT = "Box of 12"


@wholesale.aggregate
class Product:
    reference = Auto(identifier=True, increment=True)
    name = String(required=True, max_length=255, unique=True)
    supplier = Integer(default=1)
    quantity_per_unit = String(max_length=60, default=DEFAULT_QUANTITY_PER_UNIT)
    unit_price = Decimal(precision=10, scale=2, min_value=0, default=DEFAULT_UNIT_PRICE)
    units_in_stock = Integer(default=0)
    units_on_order = Integer(default=0, min_value=0)
    reorder_level = Integer(default=0, min_value=0)
    unavailable = Boolean(default=False)
    category_code = Integer(required=True)

    # -------------------------------------------------------------------
    # Stock rules
    # -------------------------------------------------------------------
    @property
    def needs_reorder(self) -> bool:
        return self.units_in_stock - self.units_on_order <= self.reorder_level

    def assert_orderable(self, quantity: int) -> None:
        """Refuse a new line of ``quantity`` units if the product cannot take it."""
        if self.unavailable:
            raise InvalidStateError({"product": ["Product unavailable"]})
        if self.units_in_stock < quantity + self.units_on_order:
            raise InvalidStateError(
                {
                    "quantity": [
                        f"Insufficient stock: {self.units_in_stock} in stock, "
                        f"{self.units_on_order} on order, {quantity} requested"
                    ]
                }
            )

    def reserve(self, quantity: int) -> None:
        """Commit ``quantity`` units to an open order line."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.assert_orderable(quantity)
        self.units_on_order += quantity

    def ship(self, quantity: int) -> None:
        """Units leave the warehouse: they are no longer in stock nor on order."""
        self.units_in_stock -= quantity
        self.units_on_order -= quantity
