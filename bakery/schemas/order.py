"""Checkout and order API schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CartItem(BaseModel):
    """Single cart line."""

    product_id: int
    variant_id: int | None = None
    quantity: int = Field(default=1, ge=1)


class CustomerInfo(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str | None = None


class DeliveryAddressPayload(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str = Field(min_length=5)


class OrderRequestBase(BaseModel):
    customer: CustomerInfo
    items: list[CartItem] = Field(min_length=1)
    fulfillment_method: Literal["delivery", "pickup"]
    fulfillment_date: date
    delivery_address: DeliveryAddressPayload | None = None
    pickup_location_id: int | None = None
    instructions: str | None = None

    @model_validator(mode="after")
    def check_fulfillment_fields(self) -> "OrderRequestBase":
        if self.fulfillment_method == "delivery" and self.delivery_address is None:
            raise ValueError("delivery_address is required for delivery orders")
        if self.fulfillment_method == "pickup" and self.pickup_location_id is None:
            raise ValueError("pickup_location_id is required for pickup orders")
        return self


class CheckoutRequest(OrderRequestBase):
    """Storefront checkout; a ``payment_token`` charges directly, otherwise a hosted checkout is created."""

    payment_token: str | None = None
    success_url: str | None = None
    cancel_url: str | None = None


class ManualOrderRequest(OrderRequestBase):
    """Back-office order taken by phone or in person."""

    payment_method: str = "cash"
    mark_paid: bool = False
    admin_notes: str | None = None


class CheckoutResponse(BaseModel):
    order_id: int
    status: str
    payment_status: str
    subtotal: int
    delivery_fee: int
    tax: int
    total_amount: int
    checkout_url: str | None = None
    checkout_session_id: str | None = None


class OrderItemRead(BaseModel):
    id: int
    product_id: int
    variant_id: int | None = None
    name: str
    quantity: int
    price_at_purchase: int

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    id: int
    customer_name: str
    customer_email: str
    customer_phone: str | None = None
    fulfillment_method: str
    fulfillment_date: date
    time_window: str | None = None
    delivery_address: dict | None = None
    delivery_zone_id: int | None = None
    pickup_location_id: int | None = None
    instructions: str | None = None
    subtotal: int
    delivery_fee: int
    tax: int
    total_amount: int
    status: str
    payment_status: str
    delivery_status: str | None = None
    pickup_status: str | None = None
    merchant_provider: str
    payment_reference: str | None = None
    admin_notes: str | None = None
    created_at: datetime
    items: list[OrderItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    status: str
    admin_notes: str | None = None


class PaymentConfirmRequest(BaseModel):
    payment_reference: str = Field(min_length=1)


class FulfillmentStatusUpdate(BaseModel):
    status: str
    notify_customer: bool = False


class BatchFulfillmentStatusUpdate(FulfillmentStatusUpdate):
    order_ids: list[int] = Field(min_length=1)


class BatchFailure(BaseModel):
    order_id: int
    reason: str


class BatchResult(BaseModel):
    updated: list[int]
    failed: list[BatchFailure]


class LocationPickups(BaseModel):
    location_id: int | None = None
    location_name: str
    orders: list[OrderRead]


class FulfillmentDay(BaseModel):
    date: date
    deliveries: list[OrderRead] = Field(default_factory=list)
    pickups: list[LocationPickups] = Field(default_factory=list)
