"""Order rule engine: the boundary consumed by the presentation layer.

Three synchronous operations, each processed as a command in its own unit
of work:

    create_order(client_code)                            -> Order
    add_line(order_number, product_reference, quantity)  -> Line
    record_shipment(order_number)                        -> Order

Failures surface as protean exceptions and a failed call leaves every store
unchanged:

    ObjectNotFoundError   unknown client, product or order
    ValidationError       malformed input, such as a non-positive quantity
    InvalidStateError     unavailable product, insufficient stock, order shipped
    ExpectedVersionError  another transaction changed or locked the same rows

The domain must be initialized with ``wholesale.init()`` before the first call.
"""

from functools import wraps

from protean.exceptions import (
    ExpectedVersionError,
    InvalidStateError,
    ObjectNotFoundError,
    TransactionError,
    ValidationError,
)
from sqlalchemy.exc import DBAPIError

from wholesale.domain import logger, wholesale
from wholesale.order.creation import CreateOrder
from wholesale.order.fulfillment import RecordShipment
from wholesale.order.modification import AddLine
from wholesale.order.order import Line, Order
from wholesale.utils.logging import add_context, clear_context
from wholesale.utils.sql import is_contention

REFUSALS = (ObjectNotFoundError, ValidationError, InvalidStateError, ExpectedVersionError)


def _process(command):
    try:
        return wholesale.process(command, asynchronous=False)
    except TransactionError as exc:
        if is_contention(exc.__cause__):
            raise ExpectedVersionError(str(exc.__cause__)) from exc
        raise
    except DBAPIError as exc:
        if is_contention(exc):
            raise ExpectedVersionError(str(exc.orig)) from exc
        raise


def _operation(method):
    @wraps(method)
    def wrapper(*args, **kwargs):
        add_context(operation=method.__name__)
        try:
            with wholesale.domain_context():
                return method(*args, **kwargs)
        except ExpectedVersionError as exc:
            logger.warning("Operation conflicted", error=str(exc))
            raise
        except REFUSALS as exc:
            logger.info(
                "Operation refused",
                error=type(exc).__name__,
                messages=getattr(exc, "messages", None) or str(exc),
            )
            raise
        finally:
            clear_context()

    return wrapper


@_operation
def create_order(client_code: str) -> Order:
    return _process(CreateOrder(client_code=client_code))


@_operation
def add_line(order_number: int, product_reference: int, quantity: int) -> Line:
    return _process(
        AddLine(
            order_number=order_number,
            product_reference=product_reference,
            quantity=quantity,
        )
    )


@_operation
def record_shipment(order_number: int) -> Order:
    return _process(RecordShipment(order_number=order_number))
