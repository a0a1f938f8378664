import os
import random
from pathlib import Path
from uuid import uuid4

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def marketplace_bed(request):
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Builders: every record gets unique names and phone numbers so tests stay
# independent of whatever earlier tests left in the store.
# ---------------------------------------------------------------------------
def unique_phone():
    return f"+91 9{random.randint(100000000, 999999999)}"


def unique_name(base):
    return f"{base}-{uuid4().hex[:8]}"


@pytest.fixture()
def register_vendor():
    from marketplace.vendor.registration import RegisterVendor

    def _register(**overrides):
        data = {
            "name": "Lakshmi",
            "phone": unique_phone(),
            "business_name": "Lakshmi Dosa Corner",
            "vendor_type": "Dosa",
        }
        data.update(overrides)
        return current_domain.process(RegisterVendor(**data), asynchronous=False)

    return _register


@pytest.fixture()
def register_supplier():
    from marketplace.supplier.registration import RegisterSupplier

    def _register(**overrides):
        data = {
            "name": "Ravi",
            "phone": unique_phone(),
            "business_name": unique_name("Ravi Fresh Veggies"),
            "business_type": "Vegetables",
        }
        data.update(overrides)
        return current_domain.process(RegisterSupplier(**data), asynchronous=False)

    return _register


@pytest.fixture()
def list_offer():
    from marketplace.product.listing import ListProduct

    def _list(supplier_id, name, price_per_kg=30.0, stock=10.0, pickup_slots=("7-9 AM",), **overrides):
        data = {
            "supplier_id": supplier_id,
            "name": name,
            "category": "Vegetables",
            "price_per_kg": price_per_kg,
            "stock": stock,
            "pickup_slots": list(pickup_slots),
        }
        data.update(overrides)
        return current_domain.process(ListProduct(**data), asynchronous=False)

    return _list


@pytest.fixture()
def place_order():
    import json

    from marketplace.order.placement import PlaceOrder

    def _place(vendor_id, items, pickup_slot="7-9 AM", **overrides):
        data = {
            "vendor_id": vendor_id,
            "items": json.dumps(items),
            "pickup_slot": pickup_slot,
            "pickup_date": "2025-01-15",
            "payment_method": "UPI",
        }
        data.update(overrides)
        return current_domain.process(PlaceOrder(**data), asynchronous=False)

    return _place


@pytest.fixture()
def change_status():
    from marketplace.order.lifecycle import UpdateOrderStatus

    def _change(order_id, actor_id, actor_role, status):
        command = UpdateOrderStatus(order_id=order_id, actor_id=actor_id, actor_role=actor_role, status=status)
        return current_domain.process(command, asynchronous=False)

    return _change


@pytest.fixture()
def market(register_vendor, register_supplier, list_offer):
    """Product P offered by supplier X (30/kg, stock 10, 7-9 AM) and Y (25/kg, stock 1, 9-11 AM)."""
    vendor_id = register_vendor()
    supplier_x = register_supplier(name="Xavier")
    supplier_y = register_supplier(name="Yusuf")
    product_name = unique_name("Onion")
    product_id = list_offer(supplier_x, product_name, price_per_kg=30.0, stock=10.0, pickup_slots=["7-9 AM"])
    list_offer(supplier_y, product_name, price_per_kg=25.0, stock=1.0, pickup_slots=["9-11 AM"])
    return {
        "vendor_id": vendor_id,
        "supplier_x": supplier_x,
        "supplier_y": supplier_y,
        "product_id": product_id,
        "product_name": product_name,
    }


def offer_stock(product_id, supplier_id):
    from marketplace.product.product import Product

    product = current_domain.repository_for(Product).get(product_id)
    return product.offer_for(supplier_id).stock


@pytest.fixture()
def stock_of():
    return offer_stock
