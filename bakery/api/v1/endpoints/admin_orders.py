"""Admin order management endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bakery.core.security import require_admin
from bakery.db.session import get_db
from bakery.models import Order, User
from bakery.schemas.order import (
    BatchFulfillmentStatusUpdate,
    BatchResult,
    FulfillmentDay,
    FulfillmentStatusUpdate,
    ManualOrderRequest,
    OrderRead,
    OrderStatusUpdate,
    PaymentConfirmRequest,
)
from bakery.services.checkout_service import confirm_payment, create_manual_order, fail_payment
from bakery.services.errors import NotFound
from bakery.services.exports import orders_by_fulfillment
from bakery.services.fulfillment_status import batch_update_fulfillment_status, update_fulfillment_status
from bakery.services.order_status import update_order_status

router: APIRouter = APIRouter()


@router.post("/manual", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_manual(
    payload: ManualOrderRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Order:
    return create_manual_order(db, payload, admin)


@router.get("", response_model=list[OrderRead])
def list_orders(
    status_filter: str | None = Query(default=None, alias="status"),
    fulfillment_method: str | None = None,
    fulfillment_date: date | None = None,
    db: Session = Depends(get_db),
) -> list[Order]:
    stmt = select(Order).options(selectinload(Order.items)).order_by(Order.created_at.desc(), Order.id.desc())
    if status_filter:
        stmt = stmt.where(Order.status == status_filter)
    if fulfillment_method:
        stmt = stmt.where(Order.fulfillment_method == fulfillment_method)
    if fulfillment_date:
        stmt = stmt.where(Order.fulfillment_date == fulfillment_date)
    return list(db.scalars(stmt).all())


@router.get("/by-fulfillment", response_model=list[FulfillmentDay])
def list_by_fulfillment(
    start: date | None = None,
    end: date | None = None,
    db: Session = Depends(get_db),
) -> list[dict]:
    return orders_by_fulfillment(db, start=start, end=end)


@router.post("/delivery-status/batch", response_model=BatchResult)
def batch_delivery_status(
    payload: BatchFulfillmentStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return batch_update_fulfillment_status(db, payload.order_ids, "delivery", payload.status, admin, payload.notify_customer)


@router.post("/pickup-status/batch", response_model=BatchResult)
def batch_pickup_status(
    payload: BatchFulfillmentStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return batch_update_fulfillment_status(db, payload.order_ids, "pickup", payload.status, admin, payload.notify_customer)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db)) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


@router.patch("/{order_id}/status", response_model=OrderRead)
def change_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Order:
    return update_order_status(db, order_id, payload.status, admin, admin_notes=payload.admin_notes)


@router.post("/{order_id}/payment/confirm", response_model=OrderRead)
def confirm_order_payment(order_id: int, payload: PaymentConfirmRequest, db: Session = Depends(get_db)) -> Order:
    return confirm_payment(db, order_id, payload.payment_reference)


@router.post("/{order_id}/payment/fail", response_model=OrderRead)
def fail_order_payment(order_id: int, db: Session = Depends(get_db)) -> Order:
    return fail_payment(db, order_id)


@router.patch("/{order_id}/delivery-status", response_model=OrderRead)
def change_delivery_status(
    order_id: int,
    payload: FulfillmentStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Order:
    return update_fulfillment_status(db, order_id, "delivery", payload.status, admin, payload.notify_customer)


@router.patch("/{order_id}/pickup-status", response_model=OrderRead)
def change_pickup_status(
    order_id: int,
    payload: FulfillmentStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Order:
    return update_fulfillment_status(db, order_id, "pickup", payload.status, admin, payload.notify_customer)
