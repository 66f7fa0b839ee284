"""Order status transition helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from bakery.models import Order, User
from bakery.services.audit_service import log_action, order_snapshot
from bakery.services.errors import NotFound, ValidationError
from bakery.services.inventory import restore_stock

logger = logging.getLogger(__name__)

ORDER_STATUSES: list[str] = [
    "pending",
    "confirmed",
    "in_production",
    "ready_for_pickup",
    "out_for_delivery",
    "completed",
    "cancelled",
    "payment_failed",
]
PAYMENT_STATUSES: list[str] = ["pending", "paid", "failed", "refunded"]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"confirmed", "cancelled", "payment_failed"},
    "confirmed": {"in_production", "cancelled"},
    "in_production": {"ready_for_pickup", "out_for_delivery", "cancelled"},
    "ready_for_pickup": {"completed"},
    "out_for_delivery": {"completed"},
    "completed": set(),
    "cancelled": set(),
    "payment_failed": set(),
}

# Statuses that only make sense for one fulfillment method.
METHOD_ONLY_STATUSES: dict[str, str] = {
    "ready_for_pickup": "pickup",
    "out_for_delivery": "delivery",
}


def can_transition(current: str, new: str, fulfillment_method: str | None = None) -> bool:
    """Return whether order can move from current to new status."""
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        return False
    required_method = METHOD_ONLY_STATUSES.get(new)
    return required_method is None or fulfillment_method is None or required_method == fulfillment_method


def set_status(order: Order, new_status: str, now: datetime) -> None:
    """Set status and update corresponding timestamps."""
    order.status = new_status
    order.status_updated_at = now

    if new_status == "confirmed":
        order.confirmed_at = now
    elif new_status == "completed":
        order.completed_at = now
    elif new_status == "cancelled":
        order.cancelled_at = now


def update_order_status(
    db: Session,
    order_id: int,
    new_status: str,
    actor: User | None,
    admin_notes: str | None = None,
    now: datetime | None = None,
) -> Order:
    """Move an order along the status flow; cancelled and failed orders put their stock back."""
    order = db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    if new_status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown order status: {new_status}")
    if not can_transition(order.status, new_status, order.fulfillment_method):
        raise ValidationError(f"Cannot change order status from {order.status} to {new_status}")

    before = order_snapshot(order)
    set_status(order, new_status, now or datetime.now(timezone.utc))
    if new_status == "payment_failed":
        order.payment_status = "failed"
    if new_status in {"cancelled", "payment_failed"}:
        restore_stock(db, order)
    if admin_notes:
        order.admin_notes = admin_notes
    log_action(
        db,
        actor=actor,
        action_type="order_status_changed",
        order_id=order.id,
        before_snapshot=before,
        after_snapshot=order_snapshot(order),
    )
    db.commit()
    db.refresh(order)
    logger.info("[ORDERS] Order %s status %s -> %s", order.id, before["status"], new_status)
    return order
