"""Application configuration."""

from decimal import Decimal
from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "Bakery Storefront API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./bakery.db")
    site_url: str = getenv("SITE_URL", "http://localhost:8000")

    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "60"))
    admin_username: str = getenv("ADMIN_USERNAME", "admin")
    admin_password: str = getenv("ADMIN_PASSWORD", "")
    admin_email: str | None = getenv("ADMIN_EMAIL")

    # Every fulfillment date is a calendar date in this zone.
    business_timezone: str = getenv("BUSINESS_TIMEZONE", "America/Boise")
    delivery_lookahead_weeks: int = int(getenv("DELIVERY_LOOKAHEAD_WEEKS", "4"))
    default_pickup_max_dates: int = int(getenv("DEFAULT_PICKUP_MAX_DATES", "4"))
    sales_tax_rate: Decimal = Decimal(getenv("SALES_TAX_RATE", "0.06"))

    merchant_provider: str = getenv("MERCHANT_PROVIDER", "stripe")
    stripe_secret_key: str = getenv("STRIPE_SECRET_KEY", "")
    stripe_api_url: str = getenv("STRIPE_API_URL", "https://api.stripe.com/v1")
    square_access_token: str = getenv("SQUARE_ACCESS_TOKEN", "")
    square_location_id: str = getenv("SQUARE_LOCATION_ID", "")
    square_environment: str = getenv("SQUARE_ENVIRONMENT", "sandbox")
    payment_timeout_seconds: float = float(getenv("PAYMENT_TIMEOUT_SECONDS", "30"))

    smtp_host: str | None = getenv("SMTP_HOST")
    smtp_port: int = int(getenv("SMTP_PORT", "587"))
    smtp_username: str | None = getenv("SMTP_USERNAME")
    smtp_password: str | None = getenv("SMTP_PASSWORD")
    smtp_from_email: str | None = getenv("SMTP_FROM_EMAIL")
    admin_notification_email: str | None = getenv("ADMIN_NOTIFICATION_EMAIL")


settings: Settings = Settings()
