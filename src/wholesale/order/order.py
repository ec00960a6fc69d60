"""Order aggregate and its Line entity, the core of the wholesale domain.

State Machine (2 states):
    OPEN (shipped_on is null) → SHIPPED (shipped_on set)

The transition is fired only by ``record_shipment`` and is irreversible.
Lines can be added only while the order is open and are never modified
afterwards; shipment touches the products they reference, not the lines.
"""

import decimal
from datetime import UTC, datetime
from enum import Enum

import sqlalchemy as sa
from protean.exceptions import InvalidStateError, ValidationError
from protean.fields import Auto, Date, DateTime, Decimal, HasMany, Integer, String

from wholesale.domain import wholesale

# Clients who ordered more than this many articles get the loyalty discount
LOYALTY_THRESHOLD = 100
LOYALTY_DISCOUNT = decimal.Decimal("0.15")


class OrderStatus(Enum):
    OPEN = "Open"
    SHIPPED = "Shipped"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@wholesale.entity(part_of="Order", limit=-1)
class Line:
    """One product-and-quantity entry of an order.

    ``position`` numbers the lines of an order from 1 in the order they were
    added.
    """

    id = Auto(identifier=True, identity_type="string")
    position = Integer(required=True, min_value=1)
    product_reference = Integer(required=True)
    quantity = Integer(required=True, min_value=1)


@wholesale.database_model(part_of=Line)
class LineModel:
    # Line ids are generated strings while every other identity is an integer
    id = sa.Column(sa.String(36), primary_key=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@wholesale.aggregate
class Order:
    number = Auto(identifier=True, increment=True)
    client_code = String(required=True, max_length=5)
    ordered_on = Date(required=True)
    delivery_address = String(max_length=255)
    discount = Decimal(precision=4, scale=2, min_value=0, max_value=1, default=decimal.Decimal("0"))
    shipped_on = Date()
    updated_at = DateTime(auto_now=True)
    lines = HasMany(Line)

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def open_for(cls, client, ordered_quantity=0, ordered_on=None):
        """Open a new order for ``client``.

        The delivery address starts as the client's current address.
        ``ordered_quantity`` is the number of articles the client has
        ordered so far; strictly more than 100 earns a 15% discount.
        """
        return cls(
            client_code=client.code,
            ordered_on=ordered_on or datetime.now(UTC).date(),
            delivery_address=client.address,
            discount=LOYALTY_DISCOUNT if ordered_quantity > LOYALTY_THRESHOLD else decimal.Decimal("0"),
        )

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------
    @property
    def status(self) -> OrderStatus:
        return OrderStatus.OPEN if self.shipped_on is None else OrderStatus.SHIPPED

    @property
    def is_open(self) -> bool:
        return self.shipped_on is None

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def product_references(self) -> list[int]:
        return sorted({line.product_reference for line in self.lines})

    def assert_open(self):
        if not self.is_open:
            raise InvalidStateError({"status": [f"Order {self.number} already shipped on {self.shipped_on}"]})

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def add_line(self, product, quantity):
        """Add ``quantity`` units of ``product`` and commit them on the product."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.assert_open()

        product.reserve(quantity)
        line = Line(position=len(self.lines) + 1, product_reference=product.reference, quantity=quantity)
        self.add_lines(line)
        return line

    # -------------------------------------------------------------------
    # Shipment
    # -------------------------------------------------------------------
    def record_shipment(self, products, shipped_on=None):
        """Ship the order: stamp the date and move every line out of stock.

        ``products`` maps each referenced product's reference to the loaded
        product aggregate.
        """
        self.assert_open()

        self.shipped_on = shipped_on or datetime.now(UTC).date()
        for line in self.lines:
            products[line.product_reference].ship(line.quantity)
