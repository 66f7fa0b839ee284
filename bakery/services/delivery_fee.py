"""ZIP-code zone lookup and delivery fee quotes."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from bakery.models import DeliveryZone

logger = logging.getLogger(__name__)

NO_ZONE_REASON = "ZIP code not in delivery zones"


@dataclass
class FeeQuote:
    """Delivery fee with the zone that produced it.

    ``applied_zone`` is None when no active zone covers the ZIP; callers must
    then treat delivery as unavailable rather than free.
    """

    fee_amount: int
    applied_zone: dict[str, Any] | None
    zone_fee: int = 0
    candidates: list[dict[str, Any]] = field(default_factory=list)
    adjustments: list[dict[str, Any]] = field(default_factory=list)
    is_pickup: bool = False

    @property
    def available(self) -> bool:
        return self.is_pickup or self.applied_zone is not None

    @property
    def breakdown(self) -> dict[str, Any]:
        return {"zone_fee": self.zone_fee, "candidates": self.candidates, "adjustments": self.adjustments}

    def to_dict(self) -> dict[str, Any]:
        return {
            "fee_amount": self.fee_amount,
            "applied_zone": self.applied_zone,
            "available": self.available,
            "breakdown": self.breakdown,
        }


def normalize_zip(zip_code: str | None) -> str:
    """Trim a ZIP and reduce ZIP+4 to its five-digit prefix."""
    value = str(zip_code or "").strip()
    if len(value) == 10 and value[5] == "-" and value[:5].isdigit():
        return value[:5]
    return value


def zones_for_zip(zones: Iterable[DeliveryZone], zip_code: str) -> list[DeliveryZone]:
    """Return active zones listing the ZIP, best match first."""
    normalized = normalize_zip(zip_code)
    if not normalized:
        return []
    matches = [
        zone
        for zone in zones
        if zone.is_active and normalized in {normalize_zip(code) for code in (zone.zip_codes or [])}
    ]
    return sorted(matches, key=lambda zone: (-zone.priority, zone.id))


def select_zone(zones: Iterable[DeliveryZone], zip_code: str) -> DeliveryZone | None:
    """Pick the highest-priority active zone for a ZIP; ties go to the oldest zone."""
    matches = zones_for_zip(zones, zip_code)
    return matches[0] if matches else None


def quote_for_zones(zones: Sequence[DeliveryZone], zip_code: str) -> FeeQuote:
    matches = zones_for_zip(zones, zip_code)
    candidates = [
        {"id": zone.id, "name": zone.name, "priority": zone.priority, "fee_amount": zone.fee_amount}
        for zone in matches
    ]
    if not matches:
        return FeeQuote(
            fee_amount=0,
            applied_zone=None,
            zone_fee=0,
            candidates=[],
            adjustments=[{"reason": NO_ZONE_REASON, "amount": 0}],
        )
    zone = matches[0]
    return FeeQuote(
        fee_amount=zone.fee_amount,
        applied_zone={"id": zone.id, "name": zone.name},
        zone_fee=zone.fee_amount,
        candidates=candidates,
    )


def calculate_delivery_fee(db: Session, zip_code: str, cart_items: Iterable[Any] = ()) -> FeeQuote:
    """Quote the delivery fee for a ZIP code from the active zones."""
    zones = db.scalars(select(DeliveryZone).where(DeliveryZone.is_active.is_(True)).order_by(DeliveryZone.id)).all()
    quote = quote_for_zones(zones, zip_code)
    if not quote.available:
        logger.info("[FULFILLMENT] No delivery zone for zip=%s", normalize_zip(zip_code))
    return quote


def pickup_fee_quote() -> FeeQuote:
    """Pickup is always free and never looks at zones."""
    return FeeQuote(fee_amount=0, applied_zone=None, zone_fee=0, is_pickup=True)
