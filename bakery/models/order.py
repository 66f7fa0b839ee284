"""Order models for storefront and manual orders."""

from datetime import date, datetime, timezone

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bakery.db.base import Base


class Order(Base):
    """Customer order with its fulfillment choice and payment state."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    fulfillment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    fulfillment_date: Mapped[date] = mapped_column(Date, nullable=False)
    time_window: Mapped[str | None] = mapped_column(String(100), nullable=True)
    delivery_address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    delivery_zone_id: Mapped[int | None] = mapped_column(ForeignKey("delivery_zones.id"), nullable=True)
    pickup_location_id: Mapped[int | None] = mapped_column(ForeignKey("pickup_locations.id"), nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    subtotal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delivery_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    delivery_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    pickup_status: Mapped[str | None] = mapped_column(String(32), nullable=True)

    merchant_provider: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(32), nullable=True)
    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    checkout_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_by_admin_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(back_populates="order", cascade="all, delete-orphan")
    delivery_zone: Mapped["DeliveryZone"] = relationship()
    pickup_location: Mapped["PickupLocation"] = relationship()

    __table_args__ = (
        Index("ix_orders_fulfillment_date", "fulfillment_method", "fulfillment_date"),
        Index("ix_orders_status", "status"),
        Index("ix_orders_payment_reference", "payment_reference"),
    )


class OrderItem(Base):
    """Snapshot of an order line item."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)
    variant_id: Mapped[int | None] = mapped_column(ForeignKey("product_variants.id"), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_at_purchase: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")


class MerchantFee(Base):
    """Processing fee ledger row recorded once a provider payment settles."""

    __tablename__ = "merchant_fees"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant_provider: Mapped[str] = mapped_column(String(16), nullable=False)
    order_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    fixed_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    total_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    net_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
