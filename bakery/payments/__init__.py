"""Merchant provider factory.

``get_provider()`` builds the provider named by ``MERCHANT_PROVIDER`` on first
use; tests swap it with ``set_provider()``.
"""

import logging

from bakery.core.config import settings
from bakery.payments.fake_provider import FakeProvider
from bakery.payments.port import MerchantProvider
from bakery.payments.square_provider import SquareProvider
from bakery.payments.stripe_provider import StripeProvider

logger = logging.getLogger(__name__)

_current_provider: MerchantProvider | None = None


def build_provider(name: str) -> MerchantProvider:
    """Create the provider for ``name`` from settings."""
    name = (name or "").strip().lower()
    if name == "stripe" and settings.stripe_secret_key:
        return StripeProvider(
            settings.stripe_secret_key,
            api_url=settings.stripe_api_url,
            timeout=settings.payment_timeout_seconds,
        )
    if name == "square" and settings.square_access_token:
        return SquareProvider(
            settings.square_access_token,
            settings.square_location_id,
            environment=settings.square_environment,
            timeout=settings.payment_timeout_seconds,
        )
    if name not in {"stripe", "square", "fake"}:
        raise ValueError(f"Unsupported merchant provider: {name}")
    if name != "fake" and settings.app_env != "dev":
        raise RuntimeError(f"Missing credentials for merchant provider {name}")
    logger.warning("[PAYMENTS] Using fake %s provider; no credentials configured.", name)
    return FakeProvider(name="stripe" if name == "fake" else name)


def get_provider() -> MerchantProvider:
    """Return the active merchant provider."""
    global _current_provider
    if _current_provider is None:
        _current_provider = build_provider(settings.merchant_provider)
    return _current_provider


def set_provider(provider: MerchantProvider) -> None:
    """Override the active merchant provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_provider() -> None:
    global _current_provider
    _current_provider = None
