"""Order listings and CSV exports for the fulfillment team."""

from __future__ import annotations

import csv
import re
from datetime import date
from io import StringIO

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bakery.models import Order, PickupLocation
from bakery.services.errors import NotFound

# Orders that will never be handed to a customer.
EXCLUDED_STATUSES: tuple[str, ...] = ("cancelled", "payment_failed")

DELIVERY_ROUTE_HEADER: list[str] = [
    "Order ID",
    "Customer Name",
    "Phone",
    "Address",
    "City",
    "State",
    "ZIP",
    "Delivery Window",
    "Zone",
    "Fee",
    "Total",
    "Items",
    "Instructions",
    "Status",
]
PICKUP_LIST_HEADER: list[str] = [
    "Order ID",
    "Customer Name",
    "Phone",
    "Email",
    "Items",
    "Pickup Window",
    "Instructions",
    "Status",
    "Total",
]


def dollars(amount: int | None) -> str:
    return f"{(amount or 0) / 100:.2f}"


def item_summary(order: Order) -> str:
    return "; ".join(f"{item.name} (x{item.quantity})" for item in order.items)


def _fulfillment_orders(method: str, fulfillment_date: date | None = None):
    stmt = (
        select(Order)
        .options(selectinload(Order.items), selectinload(Order.delivery_zone), selectinload(Order.pickup_location))
        .where(Order.fulfillment_method == method, Order.status.not_in(EXCLUDED_STATUSES))
        .order_by(Order.fulfillment_date, Order.id)
    )
    if fulfillment_date is not None:
        stmt = stmt.where(Order.fulfillment_date == fulfillment_date)
    return stmt


def delivery_routes_csv(db: Session, delivery_date: date) -> tuple[str, str]:
    """Return ``(filename, csv_text)`` for the deliveries on one date."""
    orders = db.scalars(_fulfillment_orders("delivery", delivery_date)).all()
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(DELIVERY_ROUTE_HEADER)
    for order in orders:
        address = order.delivery_address or {}
        writer.writerow(
            [
                order.id,
                order.customer_name,
                order.customer_phone or "",
                address.get("street", ""),
                address.get("city", ""),
                address.get("state", ""),
                address.get("zip", ""),
                order.time_window or "",
                order.delivery_zone.name if order.delivery_zone is not None else "",
                dollars(order.delivery_fee),
                dollars(order.total_amount),
                item_summary(order),
                order.instructions or "",
                order.delivery_status or "pending",
            ]
        )
    return f"delivery-routes-{delivery_date.isoformat()}.csv", output.getvalue()


def pickup_list_csv(db: Session, pickup_date: date, location_id: int) -> tuple[str, str]:
    """Return ``(filename, csv_text)`` for one location's pickups on one date."""
    location = db.get(PickupLocation, location_id)
    if location is None:
        raise NotFound("Pickup location not found")
    stmt = _fulfillment_orders("pickup", pickup_date).where(Order.pickup_location_id == location_id)
    orders = db.scalars(stmt).all()
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(PICKUP_LIST_HEADER)
    for order in orders:
        writer.writerow(
            [
                order.id,
                order.customer_name,
                order.customer_phone or "",
                order.customer_email,
                item_summary(order),
                order.time_window or "",
                order.instructions or "",
                order.pickup_status or "pending",
                dollars(order.total_amount),
            ]
        )
    slug = re.sub(r"\s+", "-", location.name.strip())
    return f"pickup-list-{slug}-{pickup_date.isoformat()}.csv", output.getvalue()


def orders_by_fulfillment(db: Session, start: date | None = None, end: date | None = None) -> list[dict]:
    """Group open orders by fulfillment date, pickups further split by location."""
    stmt = (
        select(Order)
        .options(selectinload(Order.items), selectinload(Order.pickup_location))
        .where(Order.status.not_in(EXCLUDED_STATUSES))
        .order_by(Order.fulfillment_date, Order.id)
    )
    if start is not None:
        stmt = stmt.where(Order.fulfillment_date >= start)
    if end is not None:
        stmt = stmt.where(Order.fulfillment_date <= end)

    days: dict[date, dict] = {}
    for order in db.scalars(stmt).all():
        day = days.setdefault(order.fulfillment_date, {"date": order.fulfillment_date, "deliveries": [], "pickups": {}})
        if order.fulfillment_method == "delivery":
            day["deliveries"].append(order)
            continue
        location_name = order.pickup_location.name if order.pickup_location is not None else "Unassigned"
        group = day["pickups"].setdefault(
            order.pickup_location_id,
            {"location_id": order.pickup_location_id, "location_name": location_name, "orders": []},
        )
        group["orders"].append(order)

    return [
        {
            "date": day["date"],
            "deliveries": day["deliveries"],
            "pickups": sorted(day["pickups"].values(), key=lambda group: group["location_name"]),
        }
        for day in days.values()
    ]
