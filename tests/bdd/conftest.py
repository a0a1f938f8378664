"""Shared BDD fixtures and step definitions for the Marketplace."""

from uuid import uuid4

import pytest
from marketplace.order.order import Order
from marketplace.product.product import Product
from marketplace.supplier.supplier import Supplier
from marketplace.vendor.vendor import Vendor
from protean import current_domain
from pytest_bdd import given, parsers, then

# Status walks used to bring a fresh order to a given state
_SUPPLIER_PATH = {
    "Pending": [],
    "Confirmed": ["Confirmed"],
    "Ready": ["Confirmed", "Ready"],
    "Completed": ["Confirmed", "Ready", "Completed"],
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def world():
    """Ids created by the scenario, plus the last captured failure."""
    return {
        "suppliers": {},
        "product_name": f"Onion-{uuid4().hex[:8]}",
        "other_product_name": f"Groundnut Oil-{uuid4().hex[:8]}",
        "product_id": None,
        "other_product_id": None,
        "order_ids": [],
        "error": None,
    }


def offer_stock(product_id, supplier_id):
    product = current_domain.repository_for(Product).get(product_id)
    return product.offer_for(supplier_id).stock


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a vendor is registered")
def vendor_registered(world, register_vendor):
    world["vendor_id"] = register_vendor()


@given(parsers.cfparse('supplier "{label}" offers the product at {price:g} per kg with stock {stock:g} in slot "{slot}"'))
def supplier_offers_product(world, register_supplier, list_offer, label, price, stock, slot):
    supplier_id = world["suppliers"].get(label) or register_supplier(name=f"Supplier {label}")
    world["suppliers"][label] = supplier_id
    world["product_id"] = list_offer(
        supplier_id, world["product_name"], price_per_kg=price, stock=stock, pickup_slots=[slot]
    )


@given(
    parsers.cfparse('supplier "{label}" offers another product at {price:g} per kg with stock {stock:g} in slot "{slot}"')
)
def supplier_offers_other_product(world, register_supplier, list_offer, label, price, stock, slot):
    supplier_id = world["suppliers"].get(label) or register_supplier(name=f"Supplier {label}")
    world["suppliers"][label] = supplier_id
    world["other_product_id"] = list_offer(
        supplier_id, world["other_product_name"], price_per_kg=price, stock=stock, pickup_slots=[slot]
    )


@given(parsers.cfparse('the vendor has a "{status}" order of {quantity:g} from supplier "{label}"'))
def vendor_has_order(world, place_order, change_status, status, quantity, label):
    supplier_id = world["suppliers"][label]
    items = [{"product_id": world["product_id"], "supplier_id": supplier_id, "quantity": quantity}]
    order_id = place_order(world["vendor_id"], items, pickup_slot=_offer_slot(world, supplier_id))[0]
    for step in _SUPPLIER_PATH[status]:
        change_status(order_id, supplier_id, "supplier", step)
    world["order_ids"] = [order_id]


def _offer_slot(world, supplier_id):
    product = current_domain.repository_for(Product).get(world["product_id"])
    return product.offer_for(supplier_id).pickup_slots[0]


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('supplier "{label}" stock is {stock:g}'))
@then(parsers.cfparse('supplier "{label}" stock is {stock:g}'))
def supplier_stock_is(world, label, stock):
    assert offer_stock(world["product_id"], world["suppliers"][label]) == pytest.approx(stock)


@then(parsers.cfparse('supplier "{label}" stock of the other product is {stock:g}'))
def supplier_other_stock_is(world, label, stock):
    assert offer_stock(world["other_product_id"], world["suppliers"][label]) == pytest.approx(stock)


@then(parsers.cfparse('the {action} fails with "{kind}"'))
def action_fails_with(world, action, kind):
    assert world["error"] is not None, f"expected the {action} to fail"
    assert getattr(world["error"], "kind", type(world["error"]).__name__) == kind


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(world, status):
    order = current_domain.repository_for(Order).get(world["order_ids"][0])
    assert order.status == status


@then(parsers.cfparse("the vendor order history has {count:d} entries"))
def vendor_history_has(world, count):
    vendor = current_domain.repository_for(Vendor).get(world["vendor_id"])
    assert len(vendor.order_history) == count


@then(parsers.cfparse('supplier "{label}" has ratings "{ratings}"'))
def supplier_has_ratings(world, label, ratings):
    supplier = current_domain.repository_for(Supplier).get(world["suppliers"][label])
    assert supplier.ratings == [int(r) for r in ratings.split(",")]


@then(parsers.cfparse('supplier "{label}" has no ratings'))
def supplier_has_no_ratings(world, label):
    supplier = current_domain.repository_for(Supplier).get(world["suppliers"][label])
    assert supplier.ratings == []


@then(parsers.cfparse('supplier "{label}" average rating is {average:g}'))
def supplier_average_is(world, label, average):
    supplier = current_domain.repository_for(Supplier).get(world["suppliers"][label])
    assert supplier.average_rating == pytest.approx(average)
