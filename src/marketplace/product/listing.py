"""Supplier catalogue management — list, update and withdraw offers."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, List, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.product import Product
from marketplace.shared.errors import ProductNotFound, SupplierNotFound
from marketplace.shared.lookup import fetch
from marketplace.supplier.supplier import Supplier

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class ListProduct:
    """Offer a product for sale, creating the catalogue entry if it is new."""

    supplier_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    category: String(required=True, max_length=20)
    unit: String(max_length=10)
    subcategory: String(max_length=100)
    description: Text()
    image: String(max_length=500)
    price_per_kg: Float(required=True)
    stock: Float(default=0.0)
    pickup_slots: List(content_type=String, default=list)
    is_available: Boolean(default=True)


@marketplace.command(part_of="Product")
class UpdateOffer:
    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    price_per_kg: Float()
    stock: Float()
    pickup_slots: Text()  # JSON array of slot labels; absent leaves slots unchanged
    is_available: Boolean()


@marketplace.command(part_of="Product")
class WithdrawOffer:
    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class ManageOffersHandler:
    @handle(ListProduct)
    def list_product(self, command):
        supplier = fetch(Supplier, command.supplier_id, SupplierNotFound)
        repo = current_domain.repository_for(Product)

        existing = repo._dao.query.filter(name=command.name, category=command.category).all().items
        if existing:
            product = existing[0]
        else:
            product = Product.list_new(
                name=command.name,
                category=command.category,
                unit=command.unit,
                subcategory=command.subcategory,
                description=command.description,
                image=command.image,
            )

        product.add_offer(
            supplier_id=command.supplier_id,
            price_per_kg=command.price_per_kg,
            stock=command.stock or 0.0,
            pickup_slots=command.pickup_slots,
            is_available=command.is_available,
        )
        repo.add(product)

        supplier.link_product(product.id)
        current_domain.repository_for(Supplier).add(supplier)

        logger.info(
            "Offer listed",
            product_id=str(product.id),
            supplier_id=str(command.supplier_id),
            new_product=not existing,
        )
        return str(product.id)

    @handle(UpdateOffer)
    def update_offer(self, command):
        product = fetch(Product, command.product_id, ProductNotFound)
        product.update_offer(
            supplier_id=command.supplier_id,
            price_per_kg=command.price_per_kg,
            stock=command.stock,
            pickup_slots=json.loads(command.pickup_slots) if command.pickup_slots else None,
            is_available=command.is_available,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(WithdrawOffer)
    def withdraw_offer(self, command):
        product = fetch(Product, command.product_id, ProductNotFound)
        product.withdraw_offer(command.supplier_id)

        repo = current_domain.repository_for(Product)
        if product.offers:
            repo.add(product)
        else:
            repo._dao.delete(product)
            logger.info("Product removed from catalogue", product_id=str(product.id))

        supplier = fetch(Supplier, command.supplier_id, SupplierNotFound)
        supplier.unlink_product(product.id)
        current_domain.repository_for(Supplier).add(supplier)
