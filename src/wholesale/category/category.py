"""Category aggregate root for product categorization."""

from protean.fields import Auto, String, Text

from wholesale.domain import wholesale


@wholesale.aggregate
class Category:
    """A named grouping of catalogue products."""

    code = Auto(identifier=True, increment=True)
    label = String(required=True, max_length=100, unique=True)
    description = Text()
