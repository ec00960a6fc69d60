"""Repository for the Client aggregate."""

from sqlalchemy import func, select

from wholesale.client.client import Client
from wholesale.domain import wholesale
from wholesale.order.order import Line, Order
from wholesale.utils.sql import model_for, session_for


@wholesale.repository(part_of=Client)
class ClientRepository:
    def ordered_quantity(self, code: str) -> int:
        """Total articles ordered by a client across all its orders, shipped or not.

        Reads committed data as of the query; lines being added concurrently
        by other transactions are not waited for.
        """
        line, order = model_for(Line), model_for(Order)
        stmt = (
            select(func.coalesce(func.sum(line.quantity), 0))
            .join(order, line.order_number == order.number)
            .where(order.client_code == code)
        )
        with session_for(self) as session:
            return int(session.scalar(stmt) or 0)
