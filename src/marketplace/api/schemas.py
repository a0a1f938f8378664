"""Pydantic request/response schemas for the Marketplace API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

PickupSlotLabel = Literal["7-9 AM", "9-11 AM", "11-1 PM", "1-3 PM", "3-5 PM", "5-7 PM", "7-9 PM"]


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class RegisterVendorRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=20)
    business_name: str | None = Field(default=None, max_length=150)
    vendor_type: Literal["Dosa", "Vadapav", "Juice", "Other"] = "Other"
    address: AddressSchema | None = None


class RegisterSupplierRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=20)
    business_name: str = Field(min_length=1, max_length=150)
    business_type: Literal["Vegetables", "Oil", "Spices", "Grains", "Other"] = "Other"
    address: AddressSchema | None = None


class SaveToKitRequest(BaseModel):
    product_id: str


class ListProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category: str
    unit: str | None = None
    subcategory: str | None = None
    description: str | None = None
    image: str | None = None
    price_per_kg: float = Field(ge=0)
    stock: float = Field(default=0, ge=0)
    pickup_slots: list[PickupSlotLabel] = Field(default_factory=list)
    is_available: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Onion",
                    "category": "Vegetables",
                    "unit": "kg",
                    "price_per_kg": 30,
                    "stock": 100,
                    "pickup_slots": ["7-9 AM", "5-7 PM"],
                }
            ]
        }
    }


class UpdateOfferRequest(BaseModel):
    price_per_kg: float | None = Field(default=None, ge=0)
    stock: float | None = Field(default=None, ge=0)
    pickup_slots: list[PickupSlotLabel] | None = None
    is_available: bool | None = None


class CartItemSchema(BaseModel):
    product_id: str = Field(min_length=1)
    supplier_id: str = Field(min_length=1)
    quantity: float = Field(ge=0.1)


class PlaceOrderRequest(BaseModel):
    items: list[CartItemSchema] = Field(min_length=1)
    pickup_slot: PickupSlotLabel
    pickup_date: date
    payment_method: Literal["UPI", "Cash", "Card"]
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "p-1", "supplier_id": "s-1", "quantity": 2}],
                    "pickup_slot": "7-9 AM",
                    "pickup_date": "2025-01-15",
                    "payment_method": "UPI",
                }
            ]
        }
    }


class SupplierStatusRequest(BaseModel):
    status: Literal["Confirmed", "Ready", "Completed", "Cancelled"]


class VendorStatusRequest(BaseModel):
    status: Literal["Cancelled"]


class RateOrderRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    review: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class VendorIdResponse(BaseModel):
    vendor_id: str


class SupplierIdResponse(BaseModel):
    supplier_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class SavedKitResponse(BaseModel):
    saved_kit: list[str]


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str
    errors: dict[str, list[str]] = Field(default_factory=dict)
