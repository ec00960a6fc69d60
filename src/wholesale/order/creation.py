"""Order creation: command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from wholesale.client.client import Client
from wholesale.domain import logger, wholesale
from wholesale.order.order import Order


@wholesale.command(part_of="Order")
class CreateOrder:
    """Open a new order for an existing client."""

    client_code = String(required=True, max_length=5)


@wholesale.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        clients = current_domain.repository_for(Client)
        client = clients.get(command.client_code)
        ordered_quantity = clients.ordered_quantity(client.code)

        order = Order.open_for(client, ordered_quantity=ordered_quantity)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order created",
            order_number=order.number,
            client_code=order.client_code,
            ordered_quantity=ordered_quantity,
            discount=str(order.discount),
        )
        return order
