"""Delivery settings and storefront fulfillment schemas."""

from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bakery.schemas.order import CartItem


def _hhmm(value: object) -> object:
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value


class DeliveryScheduleCreate(BaseModel):
    name: str = Field(min_length=1)
    day_of_week: int = Field(ge=0, le=6)
    cutoff_day: int = Field(ge=0, le=6)
    cutoff_time: str
    lead_time_days: int = Field(default=2, ge=0)
    delivery_time_window: str | None = None
    is_active: bool = True


class DeliveryScheduleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    cutoff_day: int | None = Field(default=None, ge=0, le=6)
    cutoff_time: str | None = None
    lead_time_days: int | None = Field(default=None, ge=0)
    delivery_time_window: str | None = None
    is_active: bool | None = None


class DeliveryScheduleRead(BaseModel):
    id: int
    name: str
    day_of_week: int
    cutoff_day: int
    cutoff_time: str
    lead_time_days: int
    delivery_time_window: str | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

    _cutoff = field_validator("cutoff_time", mode="before")(_hhmm)


class Address(BaseModel):
    street: str
    city: str
    state: str
    zip: str


class PickupLocationCreate(BaseModel):
    name: str = Field(min_length=1)
    address: Address
    pickup_days: list[int] = Field(min_length=1)
    pickup_time_windows: str = ""
    instructions: str | None = None
    lead_time_days: int = Field(default=0, ge=0)
    is_active: bool = True
    requires_preorder: bool = False
    cutoff_day: int | None = Field(default=None, ge=0, le=6)
    cutoff_time: str | None = None


class PickupLocationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    address: Address | None = None
    pickup_days: list[int] | None = None
    pickup_time_windows: str | None = None
    instructions: str | None = None
    lead_time_days: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    requires_preorder: bool | None = None
    cutoff_day: int | None = Field(default=None, ge=0, le=6)
    cutoff_time: str | None = None


class PickupLocationRead(BaseModel):
    id: int
    name: str
    address: dict
    pickup_days: list[int]
    pickup_time_windows: str
    instructions: str | None = None
    lead_time_days: int
    is_active: bool
    requires_preorder: bool
    cutoff_day: int | None = None
    cutoff_time: str | None = None

    model_config = ConfigDict(from_attributes=True)

    _cutoff = field_validator("cutoff_time", mode="before")(_hhmm)


class DeliveryZoneCreate(BaseModel):
    name: str = Field(min_length=1)
    zip_codes: list[str] = Field(min_length=1)
    fee_amount: int = Field(ge=0)
    priority: int = 0
    is_active: bool = True


class DeliveryZoneUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    zip_codes: list[str] | None = None
    fee_amount: int | None = Field(default=None, ge=0)
    priority: int | None = None
    is_active: bool | None = None


class DeliveryZoneRead(BaseModel):
    id: int
    name: str
    zip_codes: list[str]
    fee_amount: int
    priority: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class CalendarClosureCreate(BaseModel):
    closure_date: date
    reason: str = Field(min_length=1)
    affects_delivery: bool = True
    affects_pickup: bool = True


class CalendarClosureRead(CalendarClosureCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class OneOffDateCreate(BaseModel):
    date: date
    type: Literal["delivery", "pickup"]
    reason: str | None = None
    time_window_start: str | None = None
    time_window_end: str | None = None
    cutoff_day: int | None = Field(default=None, ge=0, le=6)
    cutoff_time: str | None = None
    lead_time_days: int | None = Field(default=None, ge=0)
    default_schedule_id: int | None = None
    pickup_location_id: int | None = None
    is_active: bool = True


class OneOffDateRead(BaseModel):
    id: int
    date: date
    type: str
    reason: str | None = None
    time_window_start: str | None = None
    time_window_end: str | None = None
    cutoff_day: int | None = None
    cutoff_time: str | None = None
    lead_time_days: int | None = None
    default_schedule_id: int | None = None
    pickup_location_id: int | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

    _times = field_validator("time_window_start", "time_window_end", "cutoff_time", mode="before")(_hhmm)


class DateOptionRead(BaseModel):
    """Offerable fulfillment date."""

    date: date
    cutoff: datetime
    time_window: str
    source: str
    name: str = ""
    schedule_id: int | None = None
    location_id: int | None = None
    one_off_id: int | None = None
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AppliedZone(BaseModel):
    id: int
    name: str


class FeeQuoteRead(BaseModel):
    fee_amount: int
    applied_zone: AppliedZone | None = None
    available: bool
    breakdown: dict

    model_config = ConfigDict(from_attributes=True)


class DeliveryFeeRequest(BaseModel):
    zip_code: str = Field(min_length=1)
    items: list[CartItem] = Field(default_factory=list)


class DeliveryOptionsRequest(BaseModel):
    zip_code: str = Field(min_length=1)
    items: list[CartItem] = Field(default_factory=list)


class DeliveryOptionsResponse(BaseModel):
    """Dates and fee for a cart shipped to one ZIP; no dates when the ZIP is not served."""

    available: bool
    dates: list[DateOptionRead]
    fee: FeeQuoteRead


class PickupOptionsRequest(BaseModel):
    items: list[CartItem] = Field(default_factory=list)
    max_dates: int | None = Field(default=None, ge=1)


class PickupLocationOption(BaseModel):
    location: PickupLocationRead
    next_pickup_date: DateOptionRead | None = None
    dates: list[DateOptionRead] = Field(default_factory=list)
