"""Square adapter using the REST API directly.

Hosted checkout uses Online Checkout payment links; direct charges go through
the Payments API with a card nonce.
"""

import logging
from typing import Any

import httpx

from bakery.payments.port import ChargeResult, CheckoutSession, LineItem, MerchantProvider, PaymentProviderError

logger = logging.getLogger(__name__)

SQUARE_VERSION = "2024-12-18"
SQUARE_API_URLS: dict[str, str] = {
    "production": "https://connect.squareup.com/v2",
    "sandbox": "https://connect.squareupsandbox.com/v2",
}


class SquareProvider(MerchantProvider):
    name = "square"

    def __init__(
        self,
        access_token: str,
        location_id: str,
        environment: str = "sandbox",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = SQUARE_API_URLS["production" if environment == "production" else "sandbox"]
        self.location_id = location_id
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {
            "Square-Version": SQUARE_VERSION,
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def _post(self, path: str, body: dict[str, Any]) -> httpx.Response:
        try:
            return self.client.post(f"{self.api_url}{path}", json=body, headers=self.headers)
        except httpx.HTTPError as exc:
            logger.error("[PAYMENTS] Square request to %s failed: %s", path, exc)
            raise PaymentProviderError(f"Square request failed: {exc}") from exc

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            return response.json()
        except ValueError as exc:
            logger.error("[PAYMENTS] Square returned a non-JSON body (HTTP %s)", response.status_code)
            raise PaymentProviderError(f"Square returned an unreadable response (HTTP {response.status_code})") from exc

    def create_checkout(
        self,
        line_items: list[LineItem],
        customer: dict[str, Any],
        urls: dict[str, str],
        metadata: dict[str, str],
    ) -> CheckoutSession:
        body: dict[str, Any] = {
            "idempotency_key": metadata.get("idempotency_key") or metadata.get("order_id", ""),
            "order": {
                "location_id": self.location_id,
                "reference_id": metadata.get("order_id"),
                "line_items": [
                    {
                        "name": item.name,
                        "quantity": str(item.quantity),
                        "base_price_money": {"amount": item.unit_amount_cents, "currency": "USD"},
                    }
                    for item in line_items
                ],
                "metadata": metadata,
            },
            "checkout_options": {"redirect_url": urls["success_url"]},
        }
        if customer.get("email"):
            body["pre_populated_data"] = {"buyer_email": customer["email"]}

        response = self._post("/online-checkout/payment-links", body)
        if response.status_code not in (200, 201):
            logger.error("[PAYMENTS] Square payment link failed: %s", response.text)
            raise PaymentProviderError("Square could not create a payment link")
        link = self._decode(response).get("payment_link", {})
        return CheckoutSession(session_id=link.get("order_id") or link["id"], url=link["url"])

    def charge(
        self,
        amount_cents: int,
        source_token: str,
        customer: dict[str, Any],
        idempotency_key: str,
        metadata: dict[str, str],
    ) -> ChargeResult:
        body: dict[str, Any] = {
            "source_id": source_token,
            "idempotency_key": idempotency_key,
            "amount_money": {"amount": amount_cents, "currency": "USD"},
            "location_id": self.location_id,
            "autocomplete": True,
            "reference_id": metadata.get("order_id"),
        }
        if customer.get("email"):
            body["buyer_email_address"] = customer["email"]

        response = self._post("/payments", body)
        payload = self._decode(response)
        if response.status_code not in (200, 201):
            errors = payload.get("errors") or [{}]
            return ChargeResult(
                success=False,
                provider_status=errors[0].get("code") or "error",
                failure_reason=errors[0].get("detail") or "Payment declined",
                raw=payload,
            )
        payment = payload.get("payment", {})
        succeeded = payment.get("status") in {"COMPLETED", "APPROVED"}
        return ChargeResult(
            success=succeeded,
            payment_reference=payment.get("id"),
            provider_status=payment.get("status"),
            failure_reason=None if succeeded else "Payment was not completed",
            raw=payload,
        )
