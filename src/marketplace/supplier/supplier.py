"""Supplier aggregate root with the SupplierReview entity."""

import math
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, List, String, Text, ValueObject

from marketplace.domain import marketplace
from marketplace.shared.address import Address, validate_phone
from marketplace.supplier.ratings import average_rating


class BusinessType(Enum):
    VEGETABLES = "Vegetables"
    OIL = "Oil"
    SPICES = "Spices"
    GRAINS = "Grains"
    OTHER = "Other"


@marketplace.entity(part_of="Supplier")
class SupplierReview:
    """A vendor's written feedback on a completed order."""

    order_id: Identifier()
    vendor_id: Identifier(required=True)
    rating: Integer(required=True, min_value=1, max_value=5)
    review: Text()
    created_at: DateTime(default=datetime.now)


@marketplace.aggregate
class Supplier:
    """A business that lists ingredient offers and fulfils pickup orders.

    ``products`` caches the ids of products the supplier has an offer on.
    ``ratings`` holds every rating value received; ``average_rating`` is
    always the mean of that list.
    """

    name: String(required=True, max_length=100)
    phone: String(required=True, max_length=20, unique=True)
    business_name: String(required=True, max_length=150)
    business_type: String(choices=BusinessType, default=BusinessType.OTHER.value)
    address: ValueObject(Address)
    products: List(content_type=String, default=list)
    ratings: List(content_type=Integer, default=list)
    reviews: HasMany(SupplierReview)
    average_rating: Float(default=0.0)
    is_onboarded: Boolean(default=True)
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def phone_must_be_dialable(self):
        validate_phone(self.phone)

    @invariant.post
    def average_rating_matches_ratings(self):
        if not math.isclose(self.average_rating or 0.0, average_rating(self.ratings), abs_tol=1e-9):
            raise ValidationError({"average_rating": ["Average rating is out of date with ratings"]})

    @classmethod
    def register(cls, name, phone, business_name, business_type=None, address=None):
        from marketplace.supplier.events import SupplierRegistered

        now = datetime.now()
        supplier = cls(
            name=name,
            phone=phone,
            business_name=business_name,
            business_type=business_type or BusinessType.OTHER.value,
            address=address,
            created_at=now,
        )
        supplier.raise_(
            SupplierRegistered(
                supplier_id=supplier.id,
                business_name=business_name,
                business_type=supplier.business_type,
                registered_at=now,
            )
        )
        return supplier

    def link_product(self, product_id):
        if str(product_id) not in self.products:
            self.products = [*self.products, str(product_id)]

    def unlink_product(self, product_id):
        self.products = [pid for pid in self.products if pid != str(product_id)]

    def record_rating(self, rating, vendor_id, review=None, order_id=None):
        """Append a rating and its review, then recompute the average."""
        from marketplace.supplier.events import SupplierRated

        now = datetime.now()
        with atomic_change(self):
            self.ratings = [*self.ratings, rating]
            self.add_reviews(
                SupplierReview(
                    order_id=order_id,
                    vendor_id=vendor_id,
                    rating=rating,
                    review=review,
                    created_at=now,
                )
            )
            self.average_rating = average_rating(self.ratings)

        self.raise_(
            SupplierRated(
                supplier_id=self.id,
                order_id=order_id,
                vendor_id=vendor_id,
                rating=rating,
                average_rating=self.average_rating,
                total_ratings=len(self.ratings),
                rated_at=now,
            )
        )

    def latest_reviews(self, limit=5):
        return sorted(self.reviews, key=lambda r: r.created_at, reverse=True)[:limit]
