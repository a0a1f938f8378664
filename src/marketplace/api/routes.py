"""FastAPI routes for the Marketplace.

Each route translates between Pydantic schemas (external contract) and
Protean commands (internal domain concepts). Read views are served straight
from repository queries.
"""

import json
from datetime import date

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.dependencies import Principal, current_principal, require_supplier, require_vendor
from marketplace.api.schemas import (
    ListProductRequest,
    OrderIdResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    RateOrderRequest,
    RegisterSupplierRequest,
    RegisterVendorRequest,
    SavedKitResponse,
    SaveToKitRequest,
    StatusResponse,
    SupplierIdResponse,
    SupplierStatusRequest,
    UpdateOfferRequest,
    VendorIdResponse,
    VendorStatusRequest,
)
from marketplace.order.analytics import order_analytics
from marketplace.order.display import get_order_detail, list_orders, orders_detail
from marketplace.order.lifecycle import UpdateOrderStatus
from marketplace.order.placement import PlaceOrder
from marketplace.order.rating import RateOrder
from marketplace.product.comparison import compare_offers
from marketplace.product.listing import ListProduct, UpdateOffer, WithdrawOffer
from marketplace.supplier.display import supplier_card, supplier_products
from marketplace.supplier.registration import RegisterSupplier
from marketplace.vendor.display import saved_kit_view
from marketplace.vendor.kit import RemoveFromKit, SaveToKit
from marketplace.vendor.registration import RegisterVendor

vendor_router = APIRouter(prefix="/vendors", tags=["vendors"])
supplier_router = APIRouter(prefix="/suppliers", tags=["suppliers"])
product_router = APIRouter(prefix="/products", tags=["products"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _address_fields(address):
    if address is None:
        return {}
    return address.model_dump()


def _change_status(order_id, principal, status):
    command = UpdateOrderStatus(
        order_id=order_id,
        actor_id=principal.actor_id,
        actor_role=principal.role.value,
        status=status,
    )
    current_domain.process(command, asynchronous=False)
    return get_order_detail(order_id, principal.actor_id, principal.role)


# --- Vendor endpoints ---


@vendor_router.post("", status_code=201, response_model=VendorIdResponse)
async def register_vendor(body: RegisterVendorRequest) -> VendorIdResponse:
    command = RegisterVendor(
        name=body.name,
        phone=body.phone,
        business_name=body.business_name,
        vendor_type=body.vendor_type,
        **_address_fields(body.address),
    )
    vendor_id = current_domain.process(command, asynchronous=False)
    return VendorIdResponse(vendor_id=vendor_id)


@vendor_router.get("/me/kit")
async def get_saved_kit(principal: Principal = Depends(require_vendor)) -> dict:
    return saved_kit_view(principal.actor_id)


@vendor_router.post("/me/kit", response_model=SavedKitResponse)
async def save_to_kit(body: SaveToKitRequest, principal: Principal = Depends(require_vendor)) -> SavedKitResponse:
    command = SaveToKit(vendor_id=principal.actor_id, product_id=body.product_id)
    saved_kit = current_domain.process(command, asynchronous=False)
    return SavedKitResponse(saved_kit=saved_kit)


@vendor_router.delete("/me/kit/{product_id}", response_model=SavedKitResponse)
async def remove_from_kit(product_id: str, principal: Principal = Depends(require_vendor)) -> SavedKitResponse:
    command = RemoveFromKit(vendor_id=principal.actor_id, product_id=product_id)
    saved_kit = current_domain.process(command, asynchronous=False)
    return SavedKitResponse(saved_kit=saved_kit)


@vendor_router.patch("/me/orders/{order_id}/status")
async def vendor_update_status(
    order_id: str, body: VendorStatusRequest, principal: Principal = Depends(require_vendor)
) -> dict:
    """Vendors may only cancel their own open orders."""
    return _change_status(order_id, principal, body.status)


# --- Supplier endpoints ---


@supplier_router.post("", status_code=201, response_model=SupplierIdResponse)
async def register_supplier(body: RegisterSupplierRequest) -> SupplierIdResponse:
    command = RegisterSupplier(
        name=body.name,
        phone=body.phone,
        business_name=body.business_name,
        business_type=body.business_type,
        **_address_fields(body.address),
    )
    supplier_id = current_domain.process(command, asynchronous=False)
    return SupplierIdResponse(supplier_id=supplier_id)


@supplier_router.get("/me/products")
async def get_own_products(principal: Principal = Depends(require_supplier)) -> dict:
    """The calling supplier's listings, each with its own offer."""
    return supplier_products(principal.actor_id)


@supplier_router.get("/{supplier_id}")
async def get_supplier(supplier_id: str, principal: Principal = Depends(current_principal)) -> dict:
    return supplier_card(supplier_id)


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def list_product(body: ListProductRequest, principal: Principal = Depends(require_supplier)) -> ProductIdResponse:
    command = ListProduct(
        supplier_id=principal.actor_id,
        name=body.name,
        category=body.category,
        unit=body.unit,
        subcategory=body.subcategory,
        description=body.description,
        image=body.image,
        price_per_kg=body.price_per_kg,
        stock=body.stock,
        pickup_slots=list(body.pickup_slots),
        is_available=body.is_available,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.put("/{product_id}/offer", response_model=ProductIdResponse)
async def update_offer(
    product_id: str, body: UpdateOfferRequest, principal: Principal = Depends(require_supplier)
) -> ProductIdResponse:
    command = UpdateOffer(
        product_id=product_id,
        supplier_id=principal.actor_id,
        price_per_kg=body.price_per_kg,
        stock=body.stock,
        pickup_slots=json.dumps(body.pickup_slots) if body.pickup_slots is not None else None,
        is_available=body.is_available,
    )
    current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.delete("/{product_id}/offer", response_model=StatusResponse)
async def withdraw_offer(product_id: str, principal: Principal = Depends(require_supplier)) -> StatusResponse:
    command = WithdrawOffer(product_id=product_id, supplier_id=principal.actor_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="withdrawn")


@product_router.get("/{product_id}/compare")
async def compare_product_offers(product_id: str, principal: Principal = Depends(current_principal)) -> dict:
    return compare_offers(product_id)


# --- Order endpoints ---


@order_router.post("", status_code=201)
async def place_order(body: PlaceOrderRequest, principal: Principal = Depends(require_vendor)) -> dict:
    """Split the cart by supplier and place one order per supplier."""
    command = PlaceOrder(
        vendor_id=principal.actor_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        pickup_slot=body.pickup_slot,
        pickup_date=body.pickup_date.isoformat(),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_ids = current_domain.process(command, asynchronous=False)
    return {"orders": orders_detail(order_ids)}


@order_router.get("")
async def get_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(current_principal),
) -> dict:
    return list_orders(principal.actor_id, principal.role, status=status, page=page, limit=limit)


@order_router.get("/analytics/summary")
async def get_analytics(
    start_date: date | None = None,
    end_date: date | None = None,
    principal: Principal = Depends(current_principal),
) -> dict:
    return order_analytics(principal.actor_id, principal.role, start=start_date, end=end_date)


@order_router.get("/{order_id}")
async def get_order(order_id: str, principal: Principal = Depends(current_principal)) -> dict:
    return get_order_detail(order_id, principal.actor_id, principal.role)


@order_router.patch("/{order_id}/cancel")
async def cancel_order(order_id: str, principal: Principal = Depends(require_vendor)) -> dict:
    return _change_status(order_id, principal, "Cancelled")


@order_router.patch("/{order_id}/status")
async def supplier_update_status(
    order_id: str, body: SupplierStatusRequest, principal: Principal = Depends(require_supplier)
) -> dict:
    return _change_status(order_id, principal, body.status)


@order_router.post("/{order_id}/rating", response_model=OrderIdResponse)
async def rate_order(
    order_id: str, body: RateOrderRequest, principal: Principal = Depends(require_vendor)
) -> OrderIdResponse:
    command = RateOrder(
        order_id=order_id,
        vendor_id=principal.actor_id,
        rating=body.rating,
        review=body.review,
    )
    current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)

