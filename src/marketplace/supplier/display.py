"""Supplier read views: the public card and the supplier's own product list."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.product.product import Product
from marketplace.shared.errors import SupplierNotFound
from marketplace.shared.lookup import fetch
from marketplace.supplier.supplier import Supplier

RECENT_REVIEW_COUNT = 5


def address_dict(address) -> dict | None:
    if address is None:
        return None
    return {
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "pincode": address.pincode,
    }


def supplier_card(supplier_id) -> dict:
    supplier = fetch(Supplier, supplier_id, SupplierNotFound)
    return {
        "supplier_id": str(supplier.id),
        "business_name": supplier.business_name,
        "business_type": supplier.business_type,
        "address": address_dict(supplier.address),
        "average_rating": supplier.average_rating,
        "total_ratings": len(supplier.ratings),
        "recent_reviews": [
            {
                "rating": review.rating,
                "review": review.review,
                "vendor_id": str(review.vendor_id),
                "created_at": review.created_at.isoformat() if review.created_at else None,
            }
            for review in supplier.latest_reviews(RECENT_REVIEW_COUNT)
        ],
    }


def supplier_products(supplier_id) -> dict:
    """Products the supplier has listed, each shown with that supplier's own offer."""
    supplier = fetch(Supplier, supplier_id, SupplierNotFound)
    product_repo = current_domain.repository_for(Product)

    products = []
    for product_id in supplier.products:
        try:
            product = product_repo.get(product_id)
        except ObjectNotFoundError:
            continue
        offer = product.offer_for(supplier.id)
        if offer is None:
            continue
        products.append(
            {
                "product_id": str(product.id),
                "name": product.name,
                "category": product.category,
                "unit": product.unit,
                "image": product.image,
                "average_price": product.average_price,
                "offer": {
                    "price_per_kg": offer.price_per_kg,
                    "stock": offer.stock,
                    "pickup_slots": list(offer.pickup_slots or []),
                    "is_available": offer.is_available,
                    "last_updated": offer.last_updated.isoformat() if offer.last_updated else None,
                },
            }
        )

    return {"supplier_id": str(supplier.id), "products": products}
