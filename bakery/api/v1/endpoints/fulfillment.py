"""Storefront delivery and pickup option endpoints.

Everything here is read only; an empty list means nothing can be offered.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bakery.db.session import get_db
from bakery.schemas.delivery import (
    DateOptionRead,
    DeliveryFeeRequest,
    DeliveryOptionsRequest,
    DeliveryOptionsResponse,
    FeeQuoteRead,
    PickupLocationOption,
    PickupLocationRead,
    PickupOptionsRequest,
)
from bakery.services.delivery_dates import (
    get_available_delivery_dates,
    get_available_pickup_dates,
    get_available_pickup_locations,
    representative_product_id,
)
from bakery.services.delivery_fee import calculate_delivery_fee
from bakery.utils.time import business_now

router: APIRouter = APIRouter()


@router.get("/delivery-dates", response_model=list[DateOptionRead])
def delivery_dates(product_id: int | None = None, db: Session = Depends(get_db)) -> list[DateOptionRead]:
    options = get_available_delivery_dates(db, product_id=product_id)
    return [DateOptionRead.model_validate(option) for option in options]


@router.get("/pickup-dates", response_model=list[DateOptionRead])
def pickup_dates(
    location_id: int,
    product_id: int | None = None,
    max_dates: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> list[DateOptionRead]:
    options = get_available_pickup_dates(db, location_id, product_id=product_id, max_dates=max_dates)
    return [DateOptionRead.model_validate(option) for option in options]


@router.get("/pickup-locations", response_model=list[PickupLocationOption])
def pickup_locations(product_id: int | None = None, db: Session = Depends(get_db)) -> list[PickupLocationOption]:
    return [
        PickupLocationOption(
            location=PickupLocationRead.model_validate(location),
            next_pickup_date=DateOptionRead.model_validate(next_date),
            dates=[DateOptionRead.model_validate(next_date)],
        )
        for location, next_date in get_available_pickup_locations(db, product_id=product_id)
    ]


@router.post("/delivery-fee", response_model=FeeQuoteRead)
def delivery_fee(payload: DeliveryFeeRequest, db: Session = Depends(get_db)) -> FeeQuoteRead:
    return FeeQuoteRead.model_validate(calculate_delivery_fee(db, payload.zip_code, payload.items))


@router.post("/delivery-options", response_model=DeliveryOptionsResponse)
def delivery_options(payload: DeliveryOptionsRequest, db: Session = Depends(get_db)) -> DeliveryOptionsResponse:
    """Fee and dates for a cart; an unserved ZIP gets no dates at all."""
    quote = calculate_delivery_fee(db, payload.zip_code, payload.items)
    options = []
    if quote.available:
        options = get_available_delivery_dates(db, product_id=representative_product_id(payload.items))
    return DeliveryOptionsResponse(
        available=quote.available and bool(options),
        dates=[DateOptionRead.model_validate(option) for option in options],
        fee=FeeQuoteRead.model_validate(quote),
    )


@router.post("/pickup-options", response_model=list[PickupLocationOption])
def pickup_options(payload: PickupOptionsRequest, db: Session = Depends(get_db)) -> list[PickupLocationOption]:
    product_id = representative_product_id(payload.items)
    now = business_now()
    results: list[PickupLocationOption] = []
    for location, next_date in get_available_pickup_locations(db, product_id=product_id, now=now):
        dates = get_available_pickup_dates(db, location.id, product_id=product_id, max_dates=payload.max_dates, now=now)
        results.append(
            PickupLocationOption(
                location=PickupLocationRead.model_validate(location),
                next_pickup_date=DateOptionRead.model_validate(next_date),
                dates=[DateOptionRead.model_validate(option) for option in dates],
            )
        )
    return results
