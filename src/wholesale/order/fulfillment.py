"""Order fulfillment: command and handler recording a shipment."""

from protean import handle
from protean.fields import Integer
from protean.utils.globals import current_domain

from wholesale.domain import logger, wholesale
from wholesale.order.order import Order
from wholesale.product.product import Product


@wholesale.command(part_of="Order")
class RecordShipment:
    """Record that an open order has left the warehouse."""

    order_number = Integer(required=True)


@wholesale.command_handler(part_of=Order)
class RecordShipmentHandler:
    @handle(RecordShipment)
    def record_shipment(self, command):
        orders = current_domain.repository_for(Order)
        products = current_domain.repository_for(Product)

        # Order row first, then products by ascending reference
        orders.lock(command.order_number)
        order = orders.get(command.order_number)
        order.assert_open()

        references = order.product_references
        if references:
            products.lock(*references)
        shipped = products.by_reference(references)

        order.record_shipment(shipped)
        orders.add(order)
        for reference in references:
            products.add(shipped[reference])

        logger.info(
            "Order shipped",
            order_number=order.number,
            shipped_on=order.shipped_on.isoformat(),
            line_count=len(order.lines),
            total_quantity=order.total_quantity,
        )
        for reference in references:
            product = shipped[reference]
            if product.units_in_stock < 0:
                logger.warning(
                    "Shipment took stock below zero",
                    order_number=order.number,
                    product_reference=product.reference,
                    units_in_stock=product.units_in_stock,
                )
        return order
