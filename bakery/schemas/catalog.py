"""Catalog API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductVariantPayload(BaseModel):
    name: str = Field(min_length=1)
    price_cents: int = Field(ge=0)
    quantity_available: int = Field(default=0, ge=0)


class ProductCreate(BaseModel):
    """Create a product with optional variants."""

    name: str = Field(min_length=1)
    description: str | None = None
    category: str | None = None
    price_cents: int = Field(ge=0)
    image_url: str | None = None
    status: str = "active"
    quantity_available: int = Field(default=0, ge=0)
    variants: list[ProductVariantPayload] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial product update; ``variants`` replaces the whole variant list when given."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: str | None = None
    price_cents: int | None = Field(default=None, ge=0)
    image_url: str | None = None
    status: str | None = None
    quantity_available: int | None = Field(default=None, ge=0)
    variants: list[ProductVariantPayload] | None = None


class ProductVariantRead(BaseModel):
    id: int
    name: str
    price_cents: int
    quantity_available: int

    model_config = ConfigDict(from_attributes=True)


class ProductRead(BaseModel):
    id: int
    name: str
    description: str | None = None
    category: str | None = None
    price_cents: int
    image_url: str | None = None
    status: str
    quantity_available: int
    created_at: datetime
    variants: list[ProductVariantRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ProductDeliveryRulePayload(BaseModel):
    """Per-product fulfillment restrictions."""

    allowed_delivery_days: list[int] | None = None
    minimum_lead_time_days: int | None = Field(default=None, ge=0)
    allow_delivery: bool = True
    allow_pickup: bool = True

    @field_validator("allowed_delivery_days")
    @classmethod
    def validate_days(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return None
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("Days must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))


class ProductDeliveryRuleRead(ProductDeliveryRulePayload):
    id: int
    product_id: int

    model_config = ConfigDict(from_attributes=True)
