"""Wholesale ordering domain: clients, the product catalogue and orders.

Orders are opened for a client, accumulate lines reserved against product
stock, and are shipped exactly once. Every aggregate lives in this one
domain so that an operation touching an order and its products commits in
a single unit of work.
"""

from protean.domain import Domain

from wholesale.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
wholesale = Domain(name="wholesale")
