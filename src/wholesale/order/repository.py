"""Repository for the Order aggregate."""

from wholesale.client.client import Client
from wholesale.domain import wholesale
from wholesale.order.order import Order
from wholesale.utils.sql import lock_rows


@wholesale.repository(part_of=Order)
class OrderRepository:
    def lock(self, number: int) -> None:
        """Lock the order row for the current unit of work."""
        lock_rows(self, number)

    def open_orders_for(self, client_code: str) -> list[Order]:
        """Unshipped orders of a client, most recent first."""
        return (
            self.query.filter(client_code=client_code, shipped_on__isnull=True)
            .order_by("-number")
            .limit(None)
            .all()
            .items
        )

    def for_company(self, company: str) -> list[Order]:
        """Orders placed by clients with this company name."""
        clients = self._domain.repository_for(Client).query.filter(company=company).limit(None).all().items
        if not clients:
            return []
        return (
            self.query.filter(client_code__in=[client.code for client in clients])
            .order_by("number")
            .limit(None)
            .all()
            .items
        )
