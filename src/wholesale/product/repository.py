"""Repository for the Product aggregate."""

from sqlalchemy import func, select

from wholesale.domain import wholesale
from wholesale.order.order import Line
from wholesale.product.product import Product
from wholesale.utils.sql import lock_rows, model_for, session_for


@wholesale.repository(part_of=Product)
class ProductRepository:
    def lock(self, *references: int) -> None:
        """Lock product rows, in reference order, for the current unit of work."""
        lock_rows(self, *references)

    def by_reference(self, references) -> dict[int, Product]:
        """Load several products in one query, keyed by reference."""
        products = self.query.filter(reference__in=list(references)).limit(None).all().items
        return {product.reference: product for product in products}

    def available_with_stock_above(self, threshold: int) -> list[Product]:
        """Products not flagged unavailable with more than ``threshold`` units in stock."""
        return (
            self.query.filter(unavailable=False, units_in_stock__gt=threshold)
            .order_by("reference")
            .limit(None)
            .all()
            .items
        )

    def units_sold_for_category(self, category_code: int) -> list[tuple[str, int]]:
        """Units ordered per product of a category, for products with at least one line."""
        product, line = model_for(Product), model_for(Line)
        stmt = (
            select(product.name, func.sum(line.quantity))
            .join(line, line.product_reference == product.reference)
            .where(product.category_code == category_code)
            .group_by(product.name)
            .order_by(product.name)
        )
        with session_for(self) as session:
            return [(name, int(units)) for name, units in session.execute(stmt)]
