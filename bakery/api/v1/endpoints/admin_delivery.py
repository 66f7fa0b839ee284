"""Admin endpoints for delivery schedules, pickup locations, zones, closures and one-off dates."""

from typing import Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery.db.session import get_db
from bakery.models import CalendarClosure, DeliverySchedule, DeliveryZone, OneOffDate, PickupLocation
from bakery.schemas.delivery import (
    CalendarClosureCreate,
    CalendarClosureRead,
    DeliveryScheduleCreate,
    DeliveryScheduleRead,
    DeliveryScheduleUpdate,
    DeliveryZoneCreate,
    DeliveryZoneRead,
    DeliveryZoneUpdate,
    OneOffDateCreate,
    OneOffDateRead,
    PickupLocationCreate,
    PickupLocationRead,
    PickupLocationUpdate,
)
from bakery.services import delivery_settings_service as service

router: APIRouter = APIRouter()


@router.get("/delivery-schedules", response_model=list[DeliveryScheduleRead])
def list_schedules(db: Session = Depends(get_db)) -> list[DeliverySchedule]:
    return service.list_schedules(db)


@router.post("/delivery-schedules", response_model=DeliveryScheduleRead, status_code=status.HTTP_201_CREATED)
def create_schedule(payload: DeliveryScheduleCreate, db: Session = Depends(get_db)) -> DeliverySchedule:
    return service.create_schedule(db, payload)


@router.patch("/delivery-schedules/{schedule_id}", response_model=DeliveryScheduleRead)
def update_schedule(schedule_id: int, payload: DeliveryScheduleUpdate, db: Session = Depends(get_db)) -> DeliverySchedule:
    return service.update_schedule(db, schedule_id, payload)


@router.post("/delivery-schedules/{schedule_id}/toggle", response_model=DeliveryScheduleRead)
def toggle_schedule(schedule_id: int, db: Session = Depends(get_db)) -> DeliverySchedule:
    return service.toggle_schedule(db, schedule_id)


@router.delete("/delivery-schedules/{schedule_id}")
def delete_schedule(schedule_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    service.delete_schedule(db, schedule_id)
    return {"message": "Delivery schedule removed"}


@router.get("/pickup-locations", response_model=list[PickupLocationRead])
def list_pickup_locations(db: Session = Depends(get_db)) -> list[PickupLocation]:
    return service.list_pickup_locations(db)


@router.post("/pickup-locations", response_model=PickupLocationRead, status_code=status.HTTP_201_CREATED)
def create_pickup_location(payload: PickupLocationCreate, db: Session = Depends(get_db)) -> PickupLocation:
    return service.create_pickup_location(db, payload)


@router.patch("/pickup-locations/{location_id}", response_model=PickupLocationRead)
def update_pickup_location(location_id: int, payload: PickupLocationUpdate, db: Session = Depends(get_db)) -> PickupLocation:
    return service.update_pickup_location(db, location_id, payload)


@router.delete("/pickup-locations/{location_id}")
def delete_pickup_location(location_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    service.delete_pickup_location(db, location_id)
    return {"message": "Pickup location removed"}


@router.get("/delivery-zones", response_model=list[DeliveryZoneRead])
def list_zones(db: Session = Depends(get_db)) -> list[DeliveryZone]:
    return service.list_zones(db)


@router.post("/delivery-zones", response_model=DeliveryZoneRead, status_code=status.HTTP_201_CREATED)
def create_zone(payload: DeliveryZoneCreate, db: Session = Depends(get_db)) -> DeliveryZone:
    return service.create_zone(db, payload)


@router.patch("/delivery-zones/{zone_id}", response_model=DeliveryZoneRead)
def update_zone(zone_id: int, payload: DeliveryZoneUpdate, db: Session = Depends(get_db)) -> DeliveryZone:
    return service.update_zone(db, zone_id, payload)


@router.delete("/delivery-zones/{zone_id}")
def delete_zone(zone_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    service.delete_zone(db, zone_id)
    return {"message": "Delivery zone removed"}


@router.get("/closures", response_model=list[CalendarClosureRead])
def list_closures(db: Session = Depends(get_db)) -> list[CalendarClosure]:
    return service.list_closures(db)


@router.post("/closures", response_model=CalendarClosureRead, status_code=status.HTTP_201_CREATED)
def create_closure(payload: CalendarClosureCreate, db: Session = Depends(get_db)) -> CalendarClosure:
    return service.create_closure(db, payload)


@router.delete("/closures/{closure_id}")
def delete_closure(closure_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    service.delete_closure(db, closure_id)
    return {"message": "Closure removed"}


@router.get("/one-off-dates", response_model=list[OneOffDateRead])
def list_one_off_dates(
    type: Literal["delivery", "pickup"] | None = None,
    db: Session = Depends(get_db),
) -> list[OneOffDate]:
    return service.list_one_off_dates(db, fulfillment_type=type)


@router.post("/one-off-dates", response_model=OneOffDateRead, status_code=status.HTTP_201_CREATED)
def create_one_off_date(payload: OneOffDateCreate, db: Session = Depends(get_db)) -> OneOffDate:
    return service.create_one_off_date(db, payload)


@router.delete("/one-off-dates/{one_off_id}")
def delete_one_off_date(one_off_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    service.delete_one_off_date(db, one_off_id)
    return {"message": "One-off date removed"}
