"""Product aggregate root with the SupplierOffer entity.

A Product is identified in the catalogue by its (name, category) pair. Each
supplier selling it owns exactly one SupplierOffer carrying that supplier's
price, stock and pickup windows. The price summary on the Product is derived
from the available offers and is recomputed on every offer mutation.

Stock only ever moves through ``adjust_stock``, which rejects any change that
would leave an offer with negative stock.
"""

import math
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, List, String, Text

from marketplace.domain import marketplace
from marketplace.product.pricing import price_summary
from marketplace.shared.choices import invalid_pickup_slots
from marketplace.shared.errors import InsufficientStock, OfferNotFound

# Decimal places kept on stock so fractional quantities do not drift
_STOCK_PRECISION = 3


class ProductCategory(Enum):
    VEGETABLES = "Vegetables"
    FRUITS = "Fruits"
    GRAINS = "Grains"
    SPICES = "Spices"
    OILS = "Oils"
    DAIRY = "Dairy"
    MEAT = "Meat"
    SEAFOOD = "Seafood"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks"
    OTHER = "Other"


class ProductUnit(Enum):
    KG = "kg"
    G = "g"
    L = "l"
    ML = "ml"
    PIECE = "piece"
    DOZEN = "dozen"
    PACK = "pack"


@marketplace.entity(part_of="Product")
class SupplierOffer:
    """One supplier's terms for a product."""

    supplier_id: Identifier(required=True)
    price_per_kg: Float(required=True, min_value=0.0)
    stock: Float(default=0.0, min_value=0.0)
    pickup_slots: List(content_type=String, default=list)
    is_available: Boolean(default=True)
    last_updated: DateTime(default=datetime.now)


@marketplace.aggregate
class Product:
    """A catalogue item that one or more suppliers offer for pickup."""

    name: String(required=True, max_length=100)
    category: String(required=True, choices=ProductCategory)
    subcategory: String(max_length=100)
    description: Text()
    image: String(max_length=500)
    unit: String(choices=ProductUnit, default=ProductUnit.KG.value)
    offers: HasMany(SupplierOffer)
    average_price: Float(default=0.0)
    min_price: Float(default=0.0)
    max_price: Float(default=0.0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def one_offer_per_supplier(self):
        supplier_ids = [str(offer.supplier_id) for offer in self.offers]
        if len(supplier_ids) != len(set(supplier_ids)):
            raise ValidationError({"offers": ["A supplier can hold only one offer per product"]})

    @invariant.post
    def pickup_slots_must_be_canonical(self):
        for offer in self.offers:
            unknown = invalid_pickup_slots(offer.pickup_slots)
            if unknown:
                raise ValidationError({"pickup_slots": [f"Unknown pickup slot(s): {', '.join(unknown)}"]})

    @invariant.post
    def price_summary_matches_available_offers(self):
        expected = price_summary(self.offers)
        pairs = (
            (self.average_price, expected.average_price),
            (self.min_price, expected.min_price),
            (self.max_price, expected.max_price),
        )
        if not all(math.isclose(actual or 0.0, wanted, abs_tol=1e-9) for actual, wanted in pairs):
            raise ValidationError({"average_price": ["Price summary is out of date with the available offers"]})

    @classmethod
    def list_new(cls, name, category, unit=None, subcategory=None, description=None, image=None):
        from marketplace.product.events import ProductListed

        now = datetime.now()
        product = cls(
            name=name,
            category=category,
            unit=unit or ProductUnit.KG.value,
            subcategory=subcategory,
            description=description,
            image=image,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=product.id,
                name=name,
                category=category,
                unit=product.unit,
                listed_at=now,
            )
        )
        return product

    def offer_for(self, supplier_id):
        """Return the supplier's offer, or None when the supplier does not sell this product."""
        return next((o for o in self.offers if str(o.supplier_id) == str(supplier_id)), None)

    def require_offer(self, supplier_id):
        offer = self.offer_for(supplier_id)
        if offer is None:
            raise OfferNotFound(self.name, supplier_id)
        return offer

    def _refresh_price_summary(self):
        summary = price_summary(self.offers)
        self.average_price = summary.average_price
        self.min_price = summary.min_price
        self.max_price = summary.max_price
        self.updated_at = datetime.now()

    def add_offer(self, supplier_id, price_per_kg, stock=0.0, pickup_slots=None, is_available=True):
        from marketplace.product.events import OfferAdded

        if self.offer_for(supplier_id) is not None:
            raise ValidationError({"product": ["You already have this product listed"]})

        now = datetime.now()
        offer = SupplierOffer(
            supplier_id=supplier_id,
            price_per_kg=price_per_kg,
            stock=stock,
            pickup_slots=list(pickup_slots or []),
            is_available=is_available,
            last_updated=now,
        )
        with atomic_change(self):
            self.add_offers(offer)
            self._refresh_price_summary()

        self.raise_(
            OfferAdded(
                product_id=self.id,
                supplier_id=supplier_id,
                price_per_kg=price_per_kg,
                stock=offer.stock,
                added_at=now,
            )
        )
        return offer

    def update_offer(self, supplier_id, price_per_kg=None, stock=None, pickup_slots=None, is_available=None):
        """Change the supplier's own terms. Absolute stock is applied as a bounded delta."""
        from marketplace.product.events import OfferUpdated

        offer = self.require_offer(supplier_id)

        with atomic_change(self):
            if stock is not None:
                self._apply_stock_delta(offer, stock - offer.stock)
            if price_per_kg is not None:
                offer.price_per_kg = price_per_kg
            if pickup_slots is not None:
                offer.pickup_slots = list(pickup_slots)
            if is_available is not None:
                offer.is_available = is_available
            offer.last_updated = datetime.now()
            self._refresh_price_summary()

        self.raise_(
            OfferUpdated(
                product_id=self.id,
                supplier_id=supplier_id,
                price_per_kg=offer.price_per_kg,
                stock=offer.stock,
                is_available=str(offer.is_available),
                updated_at=offer.last_updated,
            )
        )
        return offer

    def withdraw_offer(self, supplier_id):
        from marketplace.product.events import OfferWithdrawn

        offer = self.require_offer(supplier_id)

        with atomic_change(self):
            self.remove_offers(offer)
            self._refresh_price_summary()

        self.raise_(
            OfferWithdrawn(
                product_id=self.id,
                supplier_id=supplier_id,
                remaining_offers=len(self.offers),
                withdrawn_at=datetime.now(),
            )
        )

    def adjust_stock(self, supplier_id, delta):
        """Move the supplier's stock by `delta`, refusing to go below zero."""
        from marketplace.product.events import StockAdjusted

        offer = self.require_offer(supplier_id)
        previous = offer.stock
        self._apply_stock_delta(offer, delta)

        self.raise_(
            StockAdjusted(
                product_id=self.id,
                supplier_id=supplier_id,
                previous_stock=previous,
                new_stock=offer.stock,
                delta=delta,
            )
        )

    def _apply_stock_delta(self, offer, delta):
        new_stock = round((offer.stock or 0.0) + delta, _STOCK_PRECISION)
        if new_stock < 0:
            raise InsufficientStock(self.name, offer.supplier_id, offer.stock, -delta)
        offer.stock = new_stock
        offer.last_updated = datetime.now()
