"""Stock reservation for order lines."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from bakery.models import Order, Product, ProductVariant
from bakery.services.errors import InsufficientInventory


@dataclass(frozen=True)
class StockLine:
    product_id: int
    variant_id: int | None
    quantity: int
    name: str


def _adjust(db: Session, line: StockLine, delta: int, require_stock: bool) -> int:
    model = ProductVariant if line.variant_id is not None else Product
    object_id = line.variant_id if line.variant_id is not None else line.product_id
    stmt = (
        update(model)
        .where(model.id == object_id)
        .values(quantity_available=model.quantity_available + delta)
        .execution_options(synchronize_session=False)
    )
    if require_stock:
        stmt = stmt.where(model.quantity_available >= -delta)
    updated = db.execute(stmt).rowcount
    loaded = db.identity_map.get(identity_key(model, object_id))
    if loaded is not None:
        db.expire(loaded, ["quantity_available"])
    return updated


def reserve_stock(db: Session, lines: Iterable[StockLine]) -> None:
    """Decrement stock for every line, or raise when any line no longer fits.

    Each decrement is a single conditional UPDATE; the caller's transaction
    rolls back the earlier lines when a later one fails.
    """
    for line in lines:
        if _adjust(db, line, -line.quantity, require_stock=True) == 0:
            raise InsufficientInventory(f"Not enough {line.name} in stock")


def restore_stock(db: Session, order: Order) -> None:
    """Put the quantities of a failed or cancelled order back on the shelf."""
    for item in order.items:
        _adjust(
            db,
            StockLine(item.product_id, item.variant_id, item.quantity, item.name),
            item.quantity,
            require_stock=False,
        )
