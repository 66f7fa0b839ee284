"""Application models package."""

from bakery.models.audit_log import AuditLog
from bakery.models.catalog import Product, ProductVariant
from bakery.models.delivery import (
    CalendarClosure,
    DeliverySchedule,
    DeliveryZone,
    OneOffDate,
    PickupLocation,
    ProductDeliveryRule,
)
from bakery.models.order import MerchantFee, Order, OrderItem
from bakery.models.user import User

__all__ = [
    "User", "AuditLog", "Product", "ProductVariant", "DeliverySchedule", "PickupLocation", "DeliveryZone",
    "CalendarClosure", "OneOffDate", "ProductDeliveryRule", "Order", "OrderItem", "MerchantFee",
]
