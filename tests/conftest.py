import itertools
import logging
import os
import tempfile
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be
    referred to elsewhere as `current_domain`. The environment is selected before the domain module is imported,
    because the domain reads its configuration on import.
    """
    env = session.config.option.env
    os.environ["PROTEAN_ENV"] = env
    if env == "test":
        # A file database, so that threads in the concurrency tests share it
        os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(tempfile.mkdtemp()) / 'wholesale_test.db'}")

    from wholesale.domain import wholesale

    wholesale.init()
    wholesale.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from wholesale.domain import wholesale
    from wholesale.utils.db import drop_db, setup_db

    setup_db(wholesale)

    yield

    drop_db(wholesale)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo any logging configuration a test installs."""
    import structlog

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    config = structlog.get_config()
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.configure(**config)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
@pytest.fixture
def category():
    from protean.utils.globals import current_domain
    from wholesale.category.category import Category

    return current_domain.repository_for(Category).add(
        Category(label="Beverages", description="Soft drinks, coffees, teas, beers, and ales")
    )


@pytest.fixture
def make_client():
    from protean.utils.globals import current_domain
    from wholesale.client.client import Client

    def _make(code="ALFKI", company="Alfreds Futterkiste", address="Obere Str. 57, 12209 Berlin"):
        client = Client(code=code, company=company, contact="Maria Anders", address=address)
        return current_domain.repository_for(Client).add(client)

    return _make


@pytest.fixture
def make_product(category):
    from protean.utils.globals import current_domain
    from wholesale.product.product import Product

    def _make(name, **overrides):
        product = Product(name=name, category_code=category.code, **overrides)
        return current_domain.repository_for(Product).add(product)

    return _make


@pytest.fixture
def make_history(make_product):
    """Record a past order of ``quantity`` articles for a client, shipped by default."""
    from protean.utils.globals import current_domain
    from wholesale.client.client import Client
    from wholesale.order.order import Order
    from wholesale.product.product import Product

    counter = itertools.count(1)

    def _make(client_code, quantity, shipped=True):
        product = make_product(f"Archived product {next(counter)}", units_in_stock=quantity)
        orders = current_domain.repository_for(Order)

        order = orders.add(Order.open_for(current_domain.repository_for(Client).get(client_code)))
        order.add_line(product, quantity)
        if shipped:
            order.record_shipment({product.reference: product})
        orders.add(order)
        current_domain.repository_for(Product).add(product)
        return order

    return _make


@pytest.fixture
def load():
    """Read back the committed state of a product or an order."""
    from protean.utils.globals import current_domain
    from wholesale.order.order import Line, Order
    from wholesale.product.product import Product

    class _Loader:
        def product(self, reference):
            return current_domain.repository_for(Product).get(reference)

        def order(self, number):
            return current_domain.repository_for(Order).get(number)

        def order_count(self):
            return current_domain.repository_for(Order).query.all().total

        def line_count(self):
            return current_domain.repository_for(Line)._dao.query.all().total

    return _Loader()
