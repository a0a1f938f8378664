"""Side-by-side comparison of the offers on one product."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.product.product import Product
from marketplace.shared.errors import ProductNotFound
from marketplace.shared.lookup import fetch
from marketplace.supplier.supplier import Supplier


def compare_offers(product_id) -> dict:
    """Offers a vendor can buy right now, cheapest first."""
    product = fetch(Product, product_id, ProductNotFound)
    supplier_repo = current_domain.repository_for(Supplier)

    offers = []
    for offer in sorted(product.offers, key=lambda o: o.price_per_kg):
        if not offer.is_available or offer.stock <= 0:
            continue
        try:
            supplier = supplier_repo.get(offer.supplier_id)
        except ObjectNotFoundError:
            continue
        offers.append(
            {
                "supplier_id": str(offer.supplier_id),
                "business_name": supplier.business_name,
                "average_rating": supplier.average_rating,
                "price_per_kg": offer.price_per_kg,
                "stock": offer.stock,
                "pickup_slots": list(offer.pickup_slots or []),
            }
        )

    return {
        "product_id": str(product.id),
        "name": product.name,
        "category": product.category,
        "unit": product.unit,
        "average_price": product.average_price,
        "min_price": product.min_price,
        "max_price": product.max_price,
        "offers": offers,
    }
