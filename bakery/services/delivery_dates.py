"""Delivery and pickup date resolution.

The resolver works on plain rule objects so it can be evaluated without a
database. The ``get_*`` wrappers at the bottom load the rules for the current
configuration and always pass an explicit "now" and business timezone.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from bakery.core.config import settings
from bakery.models import CalendarClosure, DeliverySchedule, OneOffDate, PickupLocation, ProductDeliveryRule
from bakery.utils.time import business_now, business_tz, day_of_week, format_hhmm, to_business_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleRule:
    id: int
    name: str
    day_of_week: int
    cutoff_day: int
    cutoff_time: time
    lead_time_days: int = 0
    time_window: str = ""


@dataclass(frozen=True)
class PickupRule:
    id: int
    name: str
    pickup_days: tuple[int, ...]
    time_window: str = ""
    lead_time_days: int = 0
    requires_preorder: bool = False
    cutoff_day: int | None = None
    cutoff_time: time | None = None

    @property
    def has_cutoff(self) -> bool:
        return self.requires_preorder and self.cutoff_day is not None and self.cutoff_time is not None


@dataclass(frozen=True)
class OneOffRule:
    id: int
    date: date
    type: str
    reason: str | None = None
    time_window_start: time | None = None
    time_window_end: time | None = None
    cutoff_day: int | None = None
    cutoff_time: time | None = None
    lead_time_days: int | None = None
    default_schedule_id: int | None = None
    pickup_location_id: int | None = None
    is_active: bool = True

    @property
    def time_window(self) -> str | None:
        if self.time_window_start is None or self.time_window_end is None:
            return None
        return f"{format_hhmm(self.time_window_start)} - {format_hhmm(self.time_window_end)}"


@dataclass(frozen=True)
class ClosureRule:
    closure_date: date
    affects_delivery: bool = True
    affects_pickup: bool = True


@dataclass(frozen=True)
class ProductRule:
    allowed_delivery_days: tuple[int, ...] | None = None
    minimum_lead_time_days: int | None = None
    allow_delivery: bool = True
    allow_pickup: bool = True


@dataclass(frozen=True)
class DateOption:
    """One offerable fulfillment date."""

    date: date
    cutoff: datetime
    time_window: str
    source: str
    name: str = ""
    schedule_id: int | None = None
    location_id: int | None = None
    one_off_id: int | None = None
    reason: str | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "cutoff": self.cutoff.isoformat(),
            "time_window": self.time_window,
            "source": self.source,
            "name": self.name,
            "schedule_id": self.schedule_id,
            "location_id": self.location_id,
            "one_off_id": self.one_off_id,
            "reason": self.reason,
        }


def cutoff_instant(fulfillment_date: date, cutoff_day: int, cutoff_time: time, tz: ZoneInfo) -> datetime:
    """Return the ordering deadline for a fulfillment date.

    The deadline falls on the most recent ``cutoff_day`` on or before the
    fulfillment date, at ``cutoff_time`` wall-clock time in ``tz``.
    """
    days_back = (day_of_week(fulfillment_date) - cutoff_day) % 7
    cutoff_date = fulfillment_date - timedelta(days=days_back)
    return datetime.combine(cutoff_date, cutoff_time, tzinfo=tz)


def start_of_day(value: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(value, time(0, 0), tzinfo=tz)


def _is_offerable(fulfillment_date: date, cutoff: datetime, now: datetime, today: date, lead_time_days: int) -> bool:
    # Same-zone datetimes compare by wall clock, which is ambiguous when clocks fall back.
    before_cutoff = now.astimezone(timezone.utc) < cutoff.astimezone(timezone.utc)
    return before_cutoff and fulfillment_date >= today + timedelta(days=lead_time_days)


def _dates_on_weekday(start: date, end: date, weekday: int) -> Iterable[date]:
    first = start + timedelta(days=(weekday - day_of_week(start)) % 7)
    current = first
    while current < end:
        yield current
        current += timedelta(days=7)


def _effective_lead(lead_time_days: int | None, product_rule: ProductRule | None) -> int:
    lead = lead_time_days or 0
    if product_rule is not None and product_rule.minimum_lead_time_days is not None:
        lead = max(lead, product_rule.minimum_lead_time_days)
    return lead


def default_schedule(schedules: Sequence[ScheduleRule]) -> ScheduleRule | None:
    """Return the schedule one-off dates fall back to when none is named."""
    if not schedules:
        return None
    return min(schedules, key=lambda schedule: (schedule.day_of_week, schedule.id))


def resolve_delivery_dates(
    schedules: Sequence[ScheduleRule],
    one_offs: Iterable[OneOffRule],
    closures: Iterable[ClosureRule],
    now: datetime,
    tz: ZoneInfo,
    horizon_weeks: int,
    product_rule: ProductRule | None = None,
) -> list[DateOption]:
    """Return the delivery dates that can still be ordered, earliest first."""
    if product_rule is not None and not product_rule.allow_delivery:
        return []

    local_now = to_business_time(now, tz)
    today = local_now.date()
    horizon_end = today + timedelta(weeks=horizon_weeks)
    closed: set[date] = {closure.closure_date for closure in closures if closure.affects_delivery}
    allowed_days = product_rule.allowed_delivery_days if product_rule is not None else None

    def is_allowed(candidate: date) -> bool:
        if candidate in closed:
            return False
        return allowed_days is None or day_of_week(candidate) in allowed_days

    options: dict[date, DateOption] = {}
    for schedule in sorted(schedules, key=lambda item: item.id):
        lead = _effective_lead(schedule.lead_time_days, product_rule)
        for candidate in _dates_on_weekday(today, horizon_end, schedule.day_of_week):
            cutoff = cutoff_instant(candidate, schedule.cutoff_day, schedule.cutoff_time, tz)
            if not _is_offerable(candidate, cutoff, local_now, today, lead) or not is_allowed(candidate):
                continue
            options.setdefault(
                candidate,
                DateOption(
                    date=candidate,
                    cutoff=cutoff,
                    time_window=schedule.time_window,
                    source="schedule",
                    name=schedule.name,
                    schedule_id=schedule.id,
                ),
            )

    by_id = {schedule.id: schedule for schedule in schedules}
    fallback = default_schedule(schedules)
    for one_off in sorted(one_offs, key=lambda item: item.id):
        if one_off.type != "delivery" or not one_off.is_active:
            continue
        if not today <= one_off.date < horizon_end or one_off.date in options:
            continue
        base = by_id.get(one_off.default_schedule_id) if one_off.default_schedule_id is not None else None
        base = base or fallback

        cutoff_day = one_off.cutoff_day if one_off.cutoff_day is not None else (base.cutoff_day if base else None)
        cutoff_time = one_off.cutoff_time if one_off.cutoff_time is not None else (base.cutoff_time if base else None)
        lead = one_off.lead_time_days if one_off.lead_time_days is not None else (base.lead_time_days if base else 0)
        if cutoff_day is not None and cutoff_time is not None:
            cutoff = cutoff_instant(one_off.date, cutoff_day, cutoff_time, tz)
        else:
            cutoff = start_of_day(one_off.date, tz)

        if not _is_offerable(one_off.date, cutoff, local_now, today, _effective_lead(lead, product_rule)):
            continue
        if not is_allowed(one_off.date):
            continue
        options[one_off.date] = DateOption(
            date=one_off.date,
            cutoff=cutoff,
            time_window=one_off.time_window or (base.time_window if base else ""),
            source="one_off",
            name=base.name if base else "Special delivery",
            schedule_id=base.id if base else None,
            one_off_id=one_off.id,
            reason=one_off.reason,
        )

    return sorted(options.values(), key=lambda option: option.date)


def resolve_pickup_dates(
    location: PickupRule,
    one_offs: Iterable[OneOffRule],
    closures: Iterable[ClosureRule],
    now: datetime,
    tz: ZoneInfo,
    horizon_weeks: int,
    max_dates: int | None = None,
    product_rule: ProductRule | None = None,
) -> list[DateOption]:
    """Return the pickup dates offered by one location, earliest first."""
    if product_rule is not None and not product_rule.allow_pickup:
        return []

    local_now = to_business_time(now, tz)
    today = local_now.date()
    horizon_end = today + timedelta(weeks=horizon_weeks)
    closed: set[date] = {closure.closure_date for closure in closures if closure.affects_pickup}

    def location_cutoff(candidate: date) -> datetime:
        if location.has_cutoff:
            return cutoff_instant(candidate, location.cutoff_day, location.cutoff_time, tz)
        return start_of_day(candidate, tz)

    options: dict[date, DateOption] = {}
    lead = _effective_lead(location.lead_time_days, product_rule)
    for weekday in sorted(set(location.pickup_days)):
        for candidate in _dates_on_weekday(today, horizon_end, weekday):
            cutoff = location_cutoff(candidate)
            if candidate in closed or not _is_offerable(candidate, cutoff, local_now, today, lead):
                continue
            options[candidate] = DateOption(
                date=candidate,
                cutoff=cutoff,
                time_window=location.time_window,
                source="schedule",
                name=location.name,
                location_id=location.id,
            )

    for one_off in sorted(one_offs, key=lambda item: item.id):
        if one_off.type != "pickup" or not one_off.is_active:
            continue
        if one_off.pickup_location_id is not None and one_off.pickup_location_id != location.id:
            continue
        if not today <= one_off.date < horizon_end or one_off.date in options or one_off.date in closed:
            continue
        if one_off.cutoff_day is not None and one_off.cutoff_time is not None:
            cutoff = cutoff_instant(one_off.date, one_off.cutoff_day, one_off.cutoff_time, tz)
        else:
            cutoff = location_cutoff(one_off.date)
        one_off_lead = one_off.lead_time_days if one_off.lead_time_days is not None else location.lead_time_days
        if not _is_offerable(one_off.date, cutoff, local_now, today, _effective_lead(one_off_lead, product_rule)):
            continue
        options[one_off.date] = DateOption(
            date=one_off.date,
            cutoff=cutoff,
            time_window=one_off.time_window or location.time_window,
            source="one_off",
            name=location.name,
            location_id=location.id,
            one_off_id=one_off.id,
            reason=one_off.reason,
        )

    resolved = sorted(options.values(), key=lambda option: option.date)
    if max_dates:
        resolved = resolved[:max_dates]
    return resolved


def representative_product_id(cart_items: Iterable[Any]) -> int | None:
    """Return the product whose rules decide dates for the whole cart.

    The first line item governs; later items do not narrow the offer.
    """
    for item in cart_items:
        product_id = item.get("product_id") if isinstance(item, dict) else getattr(item, "product_id", None)
        if product_id is not None:
            return int(product_id)
    return None


def schedule_rule(row: DeliverySchedule) -> ScheduleRule:
    return ScheduleRule(
        id=row.id,
        name=row.name,
        day_of_week=row.day_of_week,
        cutoff_day=row.cutoff_day,
        cutoff_time=row.cutoff_time,
        lead_time_days=row.lead_time_days or 0,
        time_window=row.delivery_time_window or "",
    )


def pickup_rule(row: PickupLocation) -> PickupRule:
    return PickupRule(
        id=row.id,
        name=row.name,
        pickup_days=tuple(int(day) for day in (row.pickup_days or [])),
        time_window=row.pickup_time_windows or "",
        lead_time_days=row.lead_time_days or 0,
        requires_preorder=bool(row.requires_preorder),
        cutoff_day=row.cutoff_day,
        cutoff_time=row.cutoff_time,
    )


def one_off_rule(row: OneOffDate) -> OneOffRule:
    return OneOffRule(
        id=row.id,
        date=row.date,
        type=row.type,
        reason=row.reason,
        time_window_start=row.time_window_start,
        time_window_end=row.time_window_end,
        cutoff_day=row.cutoff_day,
        cutoff_time=row.cutoff_time,
        lead_time_days=row.lead_time_days,
        default_schedule_id=row.default_schedule_id,
        pickup_location_id=row.pickup_location_id,
        is_active=row.is_active,
    )


def load_product_rule(db: Session, product_id: int | None) -> ProductRule | None:
    if product_id is None:
        return None
    row = db.scalar(select(ProductDeliveryRule).where(ProductDeliveryRule.product_id == product_id))
    if row is None:
        return None
    allowed = tuple(int(day) for day in row.allowed_delivery_days) if row.allowed_delivery_days is not None else None
    return ProductRule(
        allowed_delivery_days=allowed,
        minimum_lead_time_days=row.minimum_lead_time_days,
        allow_delivery=row.allow_delivery,
        allow_pickup=row.allow_pickup,
    )


def _load_closures(db: Session, today: date) -> list[ClosureRule]:
    rows = db.scalars(select(CalendarClosure).where(CalendarClosure.closure_date >= today)).all()
    return [ClosureRule(row.closure_date, row.affects_delivery, row.affects_pickup) for row in rows]


def _load_one_offs(db: Session, fulfillment_type: str, today: date) -> list[OneOffRule]:
    rows = db.scalars(
        select(OneOffDate)
        .where(OneOffDate.type == fulfillment_type, OneOffDate.is_active.is_(True), OneOffDate.date >= today)
        .order_by(OneOffDate.id)
    ).all()
    return [one_off_rule(row) for row in rows]


def _resolve_now(now: datetime | None, tz: ZoneInfo) -> datetime:
    return business_now(tz) if now is None else to_business_time(now, tz)


def get_available_delivery_dates(
    db: Session,
    product_id: int | None = None,
    now: datetime | None = None,
    horizon_weeks: int | None = None,
) -> list[DateOption]:
    """Resolve delivery dates from the stored schedules, one-offs and closures."""
    tz = business_tz()
    local_now = _resolve_now(now, tz)
    today = local_now.date()
    schedules = db.scalars(
        select(DeliverySchedule).where(DeliverySchedule.is_active.is_(True)).order_by(DeliverySchedule.id)
    ).all()
    options = resolve_delivery_dates(
        [schedule_rule(row) for row in schedules],
        _load_one_offs(db, "delivery", today),
        _load_closures(db, today),
        local_now,
        tz,
        settings.delivery_lookahead_weeks if horizon_weeks is None else horizon_weeks,
        product_rule=load_product_rule(db, product_id),
    )
    logger.debug("[FULFILLMENT] %s delivery dates for product_id=%s", len(options), product_id)
    return options


def get_available_pickup_dates(
    db: Session,
    location_id: int,
    product_id: int | None = None,
    max_dates: int | None = None,
    now: datetime | None = None,
    horizon_weeks: int | None = None,
) -> list[DateOption]:
    """Resolve pickup dates for one active location.

    Unknown or inactive locations offer nothing. ``max_dates=0`` returns every
    date in the horizon.
    """
    location = db.get(PickupLocation, location_id)
    if location is None or not location.is_active:
        return []
    tz = business_tz()
    local_now = _resolve_now(now, tz)
    today = local_now.date()
    return resolve_pickup_dates(
        pickup_rule(location),
        _load_one_offs(db, "pickup", today),
        _load_closures(db, today),
        local_now,
        tz,
        settings.delivery_lookahead_weeks if horizon_weeks is None else horizon_weeks,
        max_dates=settings.default_pickup_max_dates if max_dates is None else max_dates,
        product_rule=load_product_rule(db, product_id),
    )


def get_next_pickup_date(
    db: Session,
    location_id: int,
    product_id: int | None = None,
    now: datetime | None = None,
) -> DateOption | None:
    options = get_available_pickup_dates(db, location_id, product_id=product_id, max_dates=1, now=now)
    return options[0] if options else None


def get_available_pickup_locations(
    db: Session,
    product_id: int | None = None,
    now: datetime | None = None,
) -> list[tuple[PickupLocation, DateOption]]:
    """Return active locations that have at least one pickup date, with the next one."""
    locations = db.scalars(
        select(PickupLocation).where(PickupLocation.is_active.is_(True)).order_by(PickupLocation.name, PickupLocation.id)
    ).all()
    results: list[tuple[PickupLocation, DateOption]] = []
    for location in locations:
        next_date = get_next_pickup_date(db, location.id, product_id=product_id, now=now)
        if next_date is not None:
            results.append((location, next_date))
    return results


def is_delivery_date_offered(db: Session, fulfillment_date: date, product_id: int | None = None, now: datetime | None = None) -> bool:
    return any(option.date == fulfillment_date for option in get_available_delivery_dates(db, product_id, now=now))


def is_pickup_date_offered(
    db: Session,
    location_id: int,
    fulfillment_date: date,
    product_id: int | None = None,
    now: datetime | None = None,
) -> bool:
    # Every date in the horizon, not only the first few shown to customers.
    options = get_available_pickup_dates(db, location_id, product_id=product_id, max_dates=0, now=now)
    return any(option.date == fulfillment_date for option in options)


def is_closed(db: Session, fulfillment_date: date, fulfillment_method: str) -> bool:
    closure = db.scalar(select(CalendarClosure).where(CalendarClosure.closure_date == fulfillment_date))
    if closure is None:
        return False
    return closure.affects_pickup if fulfillment_method == "pickup" else closure.affects_delivery
