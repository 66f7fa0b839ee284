"""Merchant provider port.

Checkout talks to Stripe, Square or the in-process fake only through this
interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class PaymentProviderError(Exception):
    """Provider could not be reached or rejected the request outright."""


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int
    unit_amount_cents: int


@dataclass(frozen=True)
class CheckoutSession:
    """Hosted checkout the customer is redirected to."""

    session_id: str
    url: str


@dataclass(frozen=True)
class ChargeResult:
    """Result of a direct charge attempt."""

    success: bool
    payment_reference: str | None = None
    provider_status: str | None = None
    failure_reason: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


class MerchantProvider(ABC):
    """Abstract merchant provider interface."""

    name: str = "merchant"

    @abstractmethod
    def create_checkout(
        self,
        line_items: list[LineItem],
        customer: dict[str, Any],
        urls: dict[str, str],
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """Create a hosted checkout for the given line items."""
        ...

    @abstractmethod
    def charge(
        self,
        amount_cents: int,
        source_token: str,
        customer: dict[str, Any],
        idempotency_key: str,
        metadata: dict[str, str],
    ) -> ChargeResult:
        """Charge a tokenized card immediately."""
        ...
