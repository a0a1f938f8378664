"""BDD tests for order status changes and cancellation."""

from protean.exceptions import ProteanException
from pytest_bdd import parsers, scenarios, when

scenarios("features/order_lifecycle.feature")


@when(parsers.cfparse('supplier "{label}" changes the order status to "{status}"'))
def supplier_changes_status(world, change_status, label, status):
    try:
        change_status(world["order_ids"][0], world["suppliers"][label], "supplier", status)
    except ProteanException as exc:
        world["error"] = exc


@when("the vendor cancels the order")
def vendor_cancels(world, change_status):
    try:
        change_status(world["order_ids"][0], world["vendor_id"], "vendor", "Cancelled")
    except ProteanException as exc:
        world["error"] = exc
