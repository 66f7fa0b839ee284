"""Merchant processing fees and sales tax arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from bakery.core.config import settings
from bakery.models import MerchantFee, Order

# Basis points and fixed cents per successful charge.
PROVIDER_FEES: dict[str, tuple[int, int]] = {
    "stripe": (290, 30),
    "square": (290, 30),
}


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_tax(subtotal: int, delivery_fee: int, rate: Decimal | None = None) -> int:
    """Sales tax on goods plus delivery, in cents."""
    tax_rate = settings.sales_tax_rate if rate is None else rate
    return round_half_up(Decimal(subtotal + delivery_fee) * tax_rate)


@dataclass(frozen=True)
class FeeBreakdown:
    merchant_provider: str
    order_amount: int
    percentage_fee: int
    fixed_fee: int
    total_fee: int
    net_amount: int


def calculate_merchant_fee(order_amount: int, merchant_provider: str) -> FeeBreakdown:
    """Fee charged by the provider for one payment of ``order_amount`` cents."""
    if merchant_provider not in PROVIDER_FEES:
        raise ValueError(f"Unsupported merchant provider: {merchant_provider}")
    basis_points, fixed_fee = PROVIDER_FEES[merchant_provider]
    total_fee = round_half_up(Decimal(order_amount) * basis_points / Decimal(10000)) + fixed_fee
    return FeeBreakdown(
        merchant_provider=merchant_provider,
        order_amount=order_amount,
        percentage_fee=basis_points,
        fixed_fee=fixed_fee,
        total_fee=total_fee,
        net_amount=order_amount - total_fee,
    )


def record_merchant_fee(db: Session, order: Order) -> MerchantFee | None:
    """Add the fee ledger row for a settled provider payment; manual orders have none."""
    if order.merchant_provider not in PROVIDER_FEES:
        return None
    breakdown = calculate_merchant_fee(order.total_amount, order.merchant_provider)
    fee = MerchantFee(
        order_id=order.id,
        merchant_provider=breakdown.merchant_provider,
        order_amount=breakdown.order_amount,
        percentage_fee=breakdown.percentage_fee,
        fixed_fee=breakdown.fixed_fee,
        total_fee=breakdown.total_fee,
        net_amount=breakdown.net_amount,
        payment_reference=order.payment_reference,
    )
    db.add(fee)
    return fee
