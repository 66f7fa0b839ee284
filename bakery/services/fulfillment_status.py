"""Delivery and pickup progress tracking.

These sub-statuses are advisory: they are validated against the order's
fulfillment method but never gate the main order status flow.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import Session

from bakery.models import Order, User
from bakery.services import email_service
from bakery.services.audit_service import log_action
from bakery.services.errors import BakeryError, NotFound, ValidationError

logger = logging.getLogger(__name__)

DELIVERY_STATUSES: list[str] = ["pending", "confirmed", "preparing", "out_for_delivery", "delivered"]
PICKUP_STATUSES: list[str] = ["pending", "confirmed", "preparing", "ready_for_pickup", "picked_up"]

STATUSES_BY_METHOD: dict[str, list[str]] = {"delivery": DELIVERY_STATUSES, "pickup": PICKUP_STATUSES}
STATUS_FIELD_BY_METHOD: dict[str, str] = {"delivery": "delivery_status", "pickup": "pickup_status"}


def _apply(db: Session, order_id: int, method: str, new_status: str, actor: User | None) -> Order:
    if new_status not in STATUSES_BY_METHOD[method]:
        raise ValidationError(f"Unknown {method} status: {new_status}")
    order = db.get(Order, order_id)
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    if order.fulfillment_method != method:
        raise ValidationError(f"Order {order_id} is not a {method} order")

    field = STATUS_FIELD_BY_METHOD[method]
    previous = getattr(order, field)
    setattr(order, field, new_status)
    log_action(
        db,
        actor=actor,
        action_type=f"{field}_changed",
        order_id=order.id,
        before_snapshot={field: previous},
        after_snapshot={field: new_status},
    )
    return order


def _notify(orders: Iterable[Order], new_status: str) -> None:
    for order in orders:
        try:
            email_service.send_fulfillment_update(order, new_status)
        except Exception:
            logger.exception("[EMAIL] Fulfillment update failed for order_id=%s", order.id)


def update_fulfillment_status(
    db: Session,
    order_id: int,
    method: str,
    new_status: str,
    actor: User | None,
    notify_customer: bool = False,
) -> Order:
    """Set the delivery or pickup status of one order."""
    order = _apply(db, order_id, method, new_status, actor)
    db.commit()
    db.refresh(order)
    logger.info("[FULFILLMENT] Order %s %s status -> %s", order.id, method, new_status)
    if notify_customer:
        _notify([order], new_status)
    return order


def batch_update_fulfillment_status(
    db: Session,
    order_ids: Iterable[int],
    method: str,
    new_status: str,
    actor: User | None,
    notify_customer: bool = False,
) -> dict[str, Any]:
    """Update many orders at once, committing the ones that pass validation.

    Returns ``{"updated": [ids], "failed": [{"order_id", "reason"}]}``.
    """
    updated: list[Order] = []
    failed: list[dict[str, Any]] = []
    for order_id in dict.fromkeys(order_ids):
        try:
            updated.append(_apply(db, order_id, method, new_status, actor))
        except BakeryError as exc:
            failed.append({"order_id": order_id, "reason": exc.message})
    db.commit()
    logger.info(
        "[FULFILLMENT] Batch %s status -> %s: %s updated, %s failed",
        method,
        new_status,
        len(updated),
        len(failed),
    )
    if notify_customer:
        _notify(updated, new_status)
    return {"updated": [order.id for order in updated], "failed": failed}
