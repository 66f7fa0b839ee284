"""Delivery and pickup scheduling ORM models."""

from datetime import date as dt_date, datetime, time, timezone

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bakery.db.base import Base

FULFILLMENT_TYPES: tuple[str, ...] = ("delivery", "pickup")


class DeliverySchedule(Base):
    """Weekly delivery day with its ordering cutoff and lead time."""

    __tablename__ = "delivery_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    cutoff_day: Mapped[int] = mapped_column(Integer, nullable=False)
    cutoff_time: Mapped[time] = mapped_column(Time, nullable=False)
    lead_time_days: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    delivery_time_window: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class PickupLocation(Base):
    """Physical pickup point with its weekly pickup days."""

    __tablename__ = "pickup_locations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    pickup_days: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    pickup_time_windows: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    instructions: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    lead_time_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    requires_preorder: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cutoff_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cutoff_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class DeliveryZone(Base):
    """Named group of ZIP codes sharing one delivery fee."""

    __tablename__ = "delivery_zones"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    zip_codes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    fee_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)


class CalendarClosure(Base):
    """Date on which delivery and/or pickup is blocked."""

    __tablename__ = "calendar_closures"

    id: Mapped[int] = mapped_column(primary_key=True)
    closure_date: Mapped[dt_date] = mapped_column(Date, nullable=False, unique=True, index=True)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    affects_delivery: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    affects_pickup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class OneOffDate(Base):
    """Extra delivery or pickup date outside the weekly cadence."""

    __tablename__ = "one_off_dates"
    __table_args__ = (UniqueConstraint("date", "type", name="uq_one_off_date_type"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    time_window_start: Mapped[time | None] = mapped_column(Time, nullable=True)
    time_window_end: Mapped[time | None] = mapped_column(Time, nullable=True)
    cutoff_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cutoff_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    lead_time_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    default_schedule_id: Mapped[int | None] = mapped_column(ForeignKey("delivery_schedules.id"), nullable=True)
    pickup_location_id: Mapped[int | None] = mapped_column(ForeignKey("pickup_locations.id"), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    default_schedule: Mapped[DeliverySchedule | None] = relationship()
    pickup_location: Mapped[PickupLocation | None] = relationship()


class ProductDeliveryRule(Base):
    """Per-product restrictions applied on top of schedules and locations."""

    __tablename__ = "product_delivery_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False, unique=True)
    allowed_delivery_days: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)
    minimum_lead_time_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    allow_delivery: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_pickup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
