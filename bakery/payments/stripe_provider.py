"""Stripe adapter using the REST API directly.

Hosted checkout uses Checkout Sessions; direct charges create and confirm a
PaymentIntent in one request.
"""

import logging
from typing import Any

import httpx

from bakery.payments.port import ChargeResult, CheckoutSession, LineItem, MerchantProvider, PaymentProviderError

logger = logging.getLogger(__name__)


class StripeProvider(MerchantProvider):
    name = "stripe"

    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.stripe.com/v1",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {"Authorization": f"Bearer {secret_key}"}

    def _post(self, path: str, data: dict[str, Any], idempotency_key: str | None = None) -> httpx.Response:
        headers = dict(self.headers)
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        try:
            return self.client.post(f"{self.api_url}{path}", data=data, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("[PAYMENTS] Stripe request to %s failed: %s", path, exc)
            raise PaymentProviderError(f"Stripe request failed: {exc}") from exc

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            return response.json()
        except ValueError as exc:
            logger.error("[PAYMENTS] Stripe returned a non-JSON body (HTTP %s)", response.status_code)
            raise PaymentProviderError(f"Stripe returned an unreadable response (HTTP {response.status_code})") from exc

    def create_checkout(
        self,
        line_items: list[LineItem],
        customer: dict[str, Any],
        urls: dict[str, str],
        metadata: dict[str, str],
    ) -> CheckoutSession:
        data: dict[str, Any] = {
            "mode": "payment",
            "success_url": urls["success_url"],
            "cancel_url": urls["cancel_url"],
        }
        if customer.get("email"):
            data["customer_email"] = customer["email"]
        for index, item in enumerate(line_items):
            prefix = f"line_items[{index}]"
            data[f"{prefix}[quantity]"] = item.quantity
            data[f"{prefix}[price_data][currency]"] = "usd"
            data[f"{prefix}[price_data][unit_amount]"] = item.unit_amount_cents
            data[f"{prefix}[price_data][product_data][name]"] = item.name
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = value

        response = self._post("/checkout/sessions", data)
        if response.status_code != 200:
            logger.error("[PAYMENTS] Stripe checkout session failed: %s", response.text)
            raise PaymentProviderError("Stripe could not create a checkout session")
        payload = self._decode(response)
        return CheckoutSession(session_id=payload["id"], url=payload["url"])

    def charge(
        self,
        amount_cents: int,
        source_token: str,
        customer: dict[str, Any],
        idempotency_key: str,
        metadata: dict[str, str],
    ) -> ChargeResult:
        data: dict[str, Any] = {
            "amount": amount_cents,
            "currency": "usd",
            "payment_method": source_token,
            "confirm": "true",
            "automatic_payment_methods[enabled]": "true",
            "automatic_payment_methods[allow_redirects]": "never",
        }
        if customer.get("email"):
            data["receipt_email"] = customer["email"]
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = value

        response = self._post("/payment_intents", data, idempotency_key=idempotency_key)
        payload = self._decode(response)
        if response.status_code != 200:
            error = payload.get("error", {})
            return ChargeResult(
                success=False,
                provider_status=error.get("code") or "error",
                failure_reason=error.get("message") or "Payment declined",
                raw=payload,
            )
        succeeded = payload.get("status") == "succeeded"
        return ChargeResult(
            success=succeeded,
            payment_reference=payload.get("id"),
            provider_status=payload.get("status"),
            failure_reason=None if succeeded else "Payment was not completed",
            raw=payload,
        )
