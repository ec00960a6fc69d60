"""Order modification: adding a line to an open order."""

from protean import handle
from protean.fields import Integer
from protean.utils.globals import current_domain

from wholesale.domain import logger, wholesale
from wholesale.order.order import Order
from wholesale.product.product import Product


@wholesale.command(part_of="Order")
class AddLine:
    """Add a line to an open order and commit its units on the product."""

    order_number = Integer(required=True)
    product_reference = Integer(required=True)
    quantity = Integer(required=True, min_value=1)


@wholesale.command_handler(part_of=Order)
class AddLineHandler:
    @handle(AddLine)
    def add_line(self, command):
        """Checks run in a fixed order and the first failure wins: quantity,
        product existence, product availability, stock, order existence,
        order still open.

        The product is checked on a plain read first so that its refusals
        come before the order's. Rows are then locked order first, products
        after, the same order ``RecordShipment`` takes them in.
        """
        products = current_domain.repository_for(Product)
        orders = current_domain.repository_for(Order)

        products.get(command.product_reference).assert_orderable(command.quantity)

        orders.lock(command.order_number)
        order = orders.get(command.order_number)
        order.assert_open()

        products.lock(command.product_reference)
        product = products.get(command.product_reference)

        line = order.add_line(product, command.quantity)
        orders.add(order)
        products.add(product)

        logger.info(
            "Line added",
            order_number=order.number,
            line_id=line.id,
            product_reference=line.product_reference,
            quantity=line.quantity,
            units_on_order=product.units_on_order,
        )
        if product.needs_reorder:
            logger.info(
                "Product at or below reorder level",
                product_reference=product.reference,
                units_in_stock=product.units_in_stock,
                units_on_order=product.units_on_order,
                reorder_level=product.reorder_level,
            )
        return line
