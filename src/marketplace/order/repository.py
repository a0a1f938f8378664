"""Repository for the Order aggregate."""

from marketplace.domain import marketplace
from marketplace.order.order import Order


@marketplace.repository(part_of=Order)
class OrderRepository:
    """Queries over orders by party and by order number."""

    def find_by_order_number(self, order_number: str) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def for_vendor(self, vendor_id: str) -> list[Order]:
        return self._dao.query.filter(vendor_id=str(vendor_id)).all().items

    def for_supplier(self, supplier_id: str) -> list[Order]:
        return self._dao.query.filter(supplier_id=str(supplier_id)).all().items

    def for_party(self, role: str, actor_id: str) -> list[Order]:
        """Orders the actor is a party to, newest first."""
        orders = self.for_vendor(actor_id) if role == "vendor" else self.for_supplier(actor_id)
        return sorted(orders, key=lambda o: o.created_at, reverse=True)
