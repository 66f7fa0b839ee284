"""Admin management of delivery schedules, pickup locations, zones, closures and one-off dates."""

from __future__ import annotations

import logging
from datetime import time
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from bakery.models import CalendarClosure, DeliverySchedule, DeliveryZone, OneOffDate, PickupLocation
from bakery.schemas.delivery import (
    CalendarClosureCreate,
    DeliveryScheduleCreate,
    DeliveryScheduleUpdate,
    DeliveryZoneCreate,
    DeliveryZoneUpdate,
    OneOffDateCreate,
    PickupLocationCreate,
    PickupLocationUpdate,
)
from bakery.services.delivery_fee import normalize_zip
from bakery.services.errors import NotFound, ValidationError
from bakery.utils.time import parse_hhmm

logger = logging.getLogger(__name__)


def _parse_time(value: str | None, field: str) -> time | None:
    if value is None or value == "":
        return None
    try:
        return parse_hhmm(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be in HH:MM format") from exc


def _required_time(value: str | None, field: str) -> time:
    parsed = _parse_time(value, field)
    if parsed is None:
        raise ValidationError(f"{field} is required")
    return parsed


def _get_or_404(db: Session, model: type, object_id: int, label: str) -> Any:
    instance = db.get(model, object_id)
    if instance is None:
        raise NotFound(f"{label} not found")
    return instance


# Schedules


def list_schedules(db: Session) -> list[DeliverySchedule]:
    return list(db.scalars(select(DeliverySchedule).order_by(DeliverySchedule.day_of_week, DeliverySchedule.id)).all())


def create_schedule(db: Session, payload: DeliveryScheduleCreate) -> DeliverySchedule:
    data = payload.model_dump()
    data["cutoff_time"] = _required_time(payload.cutoff_time, "cutoff_time")
    schedule = DeliverySchedule(**data)
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def update_schedule(db: Session, schedule_id: int, payload: DeliveryScheduleUpdate) -> DeliverySchedule:
    schedule = _get_or_404(db, DeliverySchedule, schedule_id, "Delivery schedule")
    data = payload.model_dump(exclude_unset=True)
    if "cutoff_time" in data:
        data["cutoff_time"] = _required_time(data["cutoff_time"], "cutoff_time")
    for key, value in data.items():
        if value is None and key in {"name", "day_of_week", "cutoff_day", "lead_time_days", "is_active"}:
            continue
        setattr(schedule, key, value)
    db.commit()
    db.refresh(schedule)
    return schedule


def toggle_schedule(db: Session, schedule_id: int) -> DeliverySchedule:
    schedule = _get_or_404(db, DeliverySchedule, schedule_id, "Delivery schedule")
    schedule.is_active = not schedule.is_active
    db.commit()
    db.refresh(schedule)
    logger.info("[FULFILLMENT] Schedule %s active=%s", schedule.id, schedule.is_active)
    return schedule


def delete_schedule(db: Session, schedule_id: int) -> None:
    schedule = _get_or_404(db, DeliverySchedule, schedule_id, "Delivery schedule")
    for one_off in db.scalars(select(OneOffDate).where(OneOffDate.default_schedule_id == schedule_id)).all():
        one_off.default_schedule_id = None
    db.delete(schedule)
    db.commit()


# Pickup locations


def _validate_pickup_fields(pickup_days: list[int], requires_preorder: bool, cutoff_day: int | None, cutoff_time: time | None) -> None:
    if not pickup_days:
        raise ValidationError("At least one pickup day is required")
    if any(day < 0 or day > 6 for day in pickup_days):
        raise ValidationError("Pickup days must be between 0 (Sunday) and 6 (Saturday)")
    if requires_preorder and (cutoff_day is None or cutoff_time is None):
        raise ValidationError("Pre-order locations need a cutoff day and time")


def list_pickup_locations(db: Session, active_only: bool = False) -> list[PickupLocation]:
    stmt = select(PickupLocation).order_by(PickupLocation.name, PickupLocation.id)
    if active_only:
        stmt = stmt.where(PickupLocation.is_active.is_(True))
    return list(db.scalars(stmt).all())


def create_pickup_location(db: Session, payload: PickupLocationCreate) -> PickupLocation:
    data = payload.model_dump()
    data["cutoff_time"] = _parse_time(payload.cutoff_time, "cutoff_time")
    data["pickup_days"] = sorted(set(payload.pickup_days))
    _validate_pickup_fields(data["pickup_days"], payload.requires_preorder, payload.cutoff_day, data["cutoff_time"])
    location = PickupLocation(**data)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


def update_pickup_location(db: Session, location_id: int, payload: PickupLocationUpdate) -> PickupLocation:
    location = _get_or_404(db, PickupLocation, location_id, "Pickup location")
    data = payload.model_dump(exclude_unset=True)
    if "cutoff_time" in data:
        data["cutoff_time"] = _parse_time(data["cutoff_time"], "cutoff_time")
    if data.get("pickup_days") is not None:
        data["pickup_days"] = sorted(set(data["pickup_days"]))
    for key, value in data.items():
        if value is None and key in {"name", "address", "pickup_days", "pickup_time_windows", "lead_time_days", "is_active", "requires_preorder"}:
            continue
        setattr(location, key, value)
    _validate_pickup_fields(location.pickup_days, location.requires_preorder, location.cutoff_day, location.cutoff_time)
    db.commit()
    db.refresh(location)
    return location


def delete_pickup_location(db: Session, location_id: int) -> None:
    location = _get_or_404(db, PickupLocation, location_id, "Pickup location")
    linked = db.scalars(select(OneOffDate).where(OneOffDate.pickup_location_id == location_id)).all()
    if linked:
        raise ValidationError("Location has one-off pickup dates. Remove them first.")
    db.delete(location)
    db.commit()


# Zones


def _clean_zip_codes(zip_codes: list[str]) -> list[str]:
    cleaned: list[str] = []
    for code in zip_codes:
        normalized = normalize_zip(code)
        if not normalized:
            continue
        if not (len(normalized) == 5 and normalized.isdigit()):
            raise ValidationError(f"Invalid ZIP code: {code}")
        if normalized not in cleaned:
            cleaned.append(normalized)
    if not cleaned:
        raise ValidationError("At least one ZIP code is required")
    return cleaned


def list_zones(db: Session) -> list[DeliveryZone]:
    return list(db.scalars(select(DeliveryZone).order_by(DeliveryZone.priority.desc(), DeliveryZone.id)).all())


def create_zone(db: Session, payload: DeliveryZoneCreate) -> DeliveryZone:
    data = payload.model_dump()
    data["zip_codes"] = _clean_zip_codes(payload.zip_codes)
    zone = DeliveryZone(**data)
    db.add(zone)
    db.commit()
    db.refresh(zone)
    return zone


def update_zone(db: Session, zone_id: int, payload: DeliveryZoneUpdate) -> DeliveryZone:
    zone = _get_or_404(db, DeliveryZone, zone_id, "Delivery zone")
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "zip_codes" in data:
        data["zip_codes"] = _clean_zip_codes(data["zip_codes"])
    for key, value in data.items():
        setattr(zone, key, value)
    db.commit()
    db.refresh(zone)
    return zone


def delete_zone(db: Session, zone_id: int) -> None:
    zone = _get_or_404(db, DeliveryZone, zone_id, "Delivery zone")
    db.delete(zone)
    db.commit()


# Closures


def list_closures(db: Session) -> list[CalendarClosure]:
    return list(db.scalars(select(CalendarClosure).order_by(CalendarClosure.closure_date)).all())


def create_closure(db: Session, payload: CalendarClosureCreate) -> CalendarClosure:
    existing = db.scalar(select(CalendarClosure).where(CalendarClosure.closure_date == payload.closure_date))
    if existing is not None:
        raise ValidationError(f"A closure already exists for {payload.closure_date.isoformat()}")
    if not payload.affects_delivery and not payload.affects_pickup:
        raise ValidationError("A closure must affect delivery, pickup or both")
    closure = CalendarClosure(**payload.model_dump())
    db.add(closure)
    db.commit()
    db.refresh(closure)
    return closure


def delete_closure(db: Session, closure_id: int) -> None:
    closure = _get_or_404(db, CalendarClosure, closure_id, "Calendar closure")
    db.delete(closure)
    db.commit()


# One-off dates


def list_one_off_dates(db: Session, fulfillment_type: str | None = None) -> list[OneOffDate]:
    stmt = select(OneOffDate).order_by(OneOffDate.date, OneOffDate.id)
    if fulfillment_type is not None:
        stmt = stmt.where(OneOffDate.type == fulfillment_type)
    return list(db.scalars(stmt).all())


def create_one_off_date(db: Session, payload: OneOffDateCreate) -> OneOffDate:
    duplicate = db.scalar(select(OneOffDate).where(OneOffDate.date == payload.date, OneOffDate.type == payload.type))
    if duplicate is not None:
        raise ValidationError(f"A {payload.type} one-off date already exists for {payload.date.isoformat()}")

    if payload.type == "delivery":
        if payload.pickup_location_id is not None:
            raise ValidationError("Delivery one-off dates cannot name a pickup location")
        if payload.default_schedule_id is not None:
            _get_or_404(db, DeliverySchedule, payload.default_schedule_id, "Delivery schedule")
    else:
        if payload.default_schedule_id is not None:
            raise ValidationError("Pickup one-off dates cannot name a delivery schedule")
        if payload.pickup_location_id is not None:
            _get_or_404(db, PickupLocation, payload.pickup_location_id, "Pickup location")

    data = payload.model_dump()
    for field in ("time_window_start", "time_window_end", "cutoff_time"):
        data[field] = _parse_time(data[field], field)
    if (data["time_window_start"] is None) != (data["time_window_end"] is None):
        raise ValidationError("Provide both time window start and end, or neither")
    if data["time_window_start"] is not None and data["time_window_start"] >= data["time_window_end"]:
        raise ValidationError("Time window start must be before its end")
    if (data["cutoff_day"] is None) != (data["cutoff_time"] is None):
        raise ValidationError("Provide both cutoff day and cutoff time, or neither")

    one_off = OneOffDate(**data)
    db.add(one_off)
    db.commit()
    db.refresh(one_off)
    return one_off


def delete_one_off_date(db: Session, one_off_id: int) -> None:
    one_off = _get_or_404(db, OneOffDate, one_off_id, "One-off date")
    db.delete(one_off)
    db.commit()
