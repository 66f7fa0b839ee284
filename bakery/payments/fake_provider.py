"""Configurable in-process merchant provider for development and tests."""

from typing import Any
from uuid import uuid4

from bakery.payments.port import ChargeResult, CheckoutSession, LineItem, MerchantProvider


class FakeProvider(MerchantProvider):
    """Records every call and succeeds or fails on demand."""

    def __init__(self, name: str = "stripe") -> None:
        self.name = name
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_checkout(
        self,
        line_items: list[LineItem],
        customer: dict[str, Any],
        urls: dict[str, str],
        metadata: dict[str, str],
    ) -> CheckoutSession:
        self.calls.append(
            {
                "method": "create_checkout",
                "line_items": line_items,
                "customer": customer,
                "urls": urls,
                "metadata": metadata,
            }
        )
        session_id = f"fake_cs_{uuid4().hex[:12]}"
        return CheckoutSession(session_id=session_id, url=f"https://checkout.example.test/{session_id}")

    def charge(
        self,
        amount_cents: int,
        source_token: str,
        customer: dict[str, Any],
        idempotency_key: str,
        metadata: dict[str, str],
    ) -> ChargeResult:
        self.calls.append(
            {
                "method": "charge",
                "amount_cents": amount_cents,
                "source_token": source_token,
                "customer": customer,
                "idempotency_key": idempotency_key,
                "metadata": metadata,
            }
        )
        if self.should_succeed:
            return ChargeResult(
                success=True,
                payment_reference=f"fake_pay_{uuid4().hex[:12]}",
                provider_status="succeeded",
            )
        return ChargeResult(success=False, provider_status="failed", failure_reason=self.failure_reason)
