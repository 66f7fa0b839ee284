"""Checkout orchestration for storefront and manual orders.

Every check that can reject an order runs before the first write. The order,
its items, the stock decrements and the payment step then share one
transaction, so a failed payment or a lost stock race leaves nothing behind.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from uuid import uuid4

from sqlalchemy.orm import Session

from bakery.core.config import settings
from bakery.db.session import transaction_scope
from bakery.models import Order, OrderItem, PickupLocation, Product, ProductVariant, User
from bakery.payments import get_provider
from bakery.payments.port import LineItem, MerchantProvider, PaymentProviderError
from bakery.schemas.order import CartItem, CheckoutRequest, ManualOrderRequest, OrderRequestBase
from bakery.services import email_service
from bakery.services.audit_service import log_action, order_snapshot
from bakery.services.catalog_service import STOREFRONT_STATUSES
from bakery.services.delivery_dates import (
    DateOption,
    get_available_delivery_dates,
    get_available_pickup_dates,
    is_closed,
    representative_product_id,
)
from bakery.services.delivery_fee import calculate_delivery_fee, normalize_zip
from bakery.services.errors import InsufficientInventory, NoFulfillmentAvailable, NotFound, PaymentFailed, ValidationError
from bakery.services.inventory import StockLine, reserve_stock, restore_stock
from bakery.services.merchant_fees import calculate_tax, record_merchant_fee
from bakery.services.order_status import set_status
from bakery.utils.time import business_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedLine:
    product: Product
    variant: ProductVariant | None
    quantity: int
    unit_price: int

    @property
    def name(self) -> str:
        if self.variant is None:
            return self.product.name
        return f"{self.product.name} - {self.variant.name}"

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def stock_line(self) -> StockLine:
        return StockLine(self.product.id, self.variant.id if self.variant else None, self.quantity, self.name)


@dataclass(frozen=True)
class FulfillmentChoice:
    method: str
    fulfillment_date: date
    delivery_fee: int = 0
    delivery_zone_id: int | None = None
    pickup_location_id: int | None = None
    time_window: str | None = None
    delivery_address: dict | None = None


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    checkout_url: str | None = None
    checkout_session_id: str | None = None


def price_cart(db: Session, items: Sequence[CartItem]) -> list[PricedLine]:
    """Price every cart line from the catalog and check stock for the whole cart."""
    lines: list[PricedLine] = []
    requested: dict[tuple[str, int], int] = defaultdict(int)
    for item in items:
        product = db.get(Product, item.product_id)
        if product is None or product.status not in STOREFRONT_STATUSES:
            raise NotFound(f"Product {item.product_id} not found")
        variant: ProductVariant | None = None
        if item.variant_id is not None:
            variant = db.get(ProductVariant, item.variant_id)
            if variant is None or variant.product_id != product.id:
                raise NotFound(f"Variant {item.variant_id} not found for product {product.id}")
        line = PricedLine(
            product=product,
            variant=variant,
            quantity=item.quantity,
            unit_price=variant.price_cents if variant else product.price_cents,
        )
        lines.append(line)

        key = ("variant", variant.id) if variant else ("product", product.id)
        requested[key] += item.quantity
        available = variant.quantity_available if variant else product.quantity_available
        if requested[key] > available:
            raise InsufficientInventory(f"Only {available} of {line.name} available")
    return lines


def _find_option(options: Sequence[DateOption], fulfillment_date: date) -> DateOption | None:
    return next((option for option in options if option.date == fulfillment_date), None)


def resolve_fulfillment(
    db: Session,
    request: OrderRequestBase,
    now: datetime,
    manual: bool = False,
) -> FulfillmentChoice:
    """Check the chosen method and date against the current configuration.

    Manual orders may use any date that is not closed; storefront orders must
    pick a date the resolver offers for the cart's representative product.
    """
    product_id = representative_product_id(request.items)
    if request.fulfillment_method == "delivery":
        address = request.delivery_address
        quote = calculate_delivery_fee(db, address.zip, request.items)
        if not quote.available:
            raise NoFulfillmentAvailable(f"Delivery is not available for ZIP {normalize_zip(address.zip)}")
        options = get_available_delivery_dates(db, product_id=product_id, now=now)
        option = _find_option(options, request.fulfillment_date)
        if manual:
            if is_closed(db, request.fulfillment_date, "delivery"):
                raise NoFulfillmentAvailable(f"Delivery is closed on {request.fulfillment_date.isoformat()}")
        elif option is None:
            raise NoFulfillmentAvailable(f"Delivery is not available on {request.fulfillment_date.isoformat()}")
        address_data = address.model_dump()
        address_data["zip"] = normalize_zip(address.zip)
        return FulfillmentChoice(
            method="delivery",
            fulfillment_date=request.fulfillment_date,
            delivery_fee=quote.fee_amount,
            delivery_zone_id=quote.applied_zone["id"],
            time_window=option.time_window if option else None,
            delivery_address=address_data,
        )

    location = db.get(PickupLocation, request.pickup_location_id)
    if location is None or not location.is_active:
        raise NoFulfillmentAvailable("Pickup location is not available")
    options = get_available_pickup_dates(db, location.id, product_id=product_id, max_dates=0, now=now)
    option = _find_option(options, request.fulfillment_date)
    if manual:
        if is_closed(db, request.fulfillment_date, "pickup"):
            raise NoFulfillmentAvailable(f"Pickup is closed on {request.fulfillment_date.isoformat()}")
    elif option is None:
        raise NoFulfillmentAvailable(f"Pickup is not available on {request.fulfillment_date.isoformat()}")
    return FulfillmentChoice(
        method="pickup",
        fulfillment_date=request.fulfillment_date,
        pickup_location_id=location.id,
        time_window=option.time_window if option else location.pickup_time_windows,
    )


def _build_order(request: OrderRequestBase, choice: FulfillmentChoice, lines: Sequence[PricedLine], merchant_provider: str) -> Order:
    subtotal = sum(line.line_total for line in lines)
    tax = calculate_tax(subtotal, choice.delivery_fee)
    order = Order(
        customer_name=request.customer.name.strip(),
        customer_email=request.customer.email.strip(),
        customer_phone=request.customer.phone,
        fulfillment_method=choice.method,
        fulfillment_date=choice.fulfillment_date,
        time_window=choice.time_window,
        delivery_address=choice.delivery_address,
        delivery_zone_id=choice.delivery_zone_id,
        pickup_location_id=choice.pickup_location_id,
        instructions=request.instructions,
        subtotal=subtotal,
        delivery_fee=choice.delivery_fee,
        tax=tax,
        total_amount=subtotal + choice.delivery_fee + tax,
        status="pending",
        payment_status="pending",
        delivery_status="pending" if choice.method == "delivery" else None,
        pickup_status="pending" if choice.method == "pickup" else None,
        merchant_provider=merchant_provider,
    )
    order.items = [
        OrderItem(
            product_id=line.product.id,
            variant_id=line.variant.id if line.variant else None,
            name=line.name,
            quantity=line.quantity,
            price_at_purchase=line.unit_price,
        )
        for line in lines
    ]
    return order


def _provider_line_items(order: Order) -> list[LineItem]:
    items = [LineItem(item.name, item.quantity, item.price_at_purchase) for item in order.items]
    if order.delivery_fee:
        items.append(LineItem("Delivery fee", 1, order.delivery_fee))
    if order.tax:
        items.append(LineItem("Sales tax", 1, order.tax))
    return items


def _mark_paid(order: Order, payment_reference: str | None, now: datetime) -> None:
    order.payment_status = "paid"
    order.payment_reference = payment_reference
    set_status(order, "confirmed", now)


def send_order_notifications(order: Order) -> None:
    """Customer confirmation and admin notice; failures are logged and ignored."""
    try:
        email_service.send_order_confirmation(order)
    except Exception:
        logger.exception("[EMAIL] Order confirmation failed for order_id=%s", order.id)
    try:
        email_service.send_admin_new_order(order)
    except Exception:
        logger.exception("[EMAIL] Admin notification failed for order_id=%s", order.id)


def checkout(
    db: Session,
    request: CheckoutRequest,
    provider: MerchantProvider | None = None,
    now: datetime | None = None,
) -> CheckoutResult:
    """Validate, persist and pay for a storefront order."""
    provider = provider or get_provider()
    now = now or business_now()

    choice = resolve_fulfillment(db, request, now)
    lines = price_cart(db, request.items)
    customer = {"name": request.customer.name, "email": request.customer.email, "phone": request.customer.phone}
    session_url: str | None = None

    with transaction_scope(db):
        order = _build_order(request, choice, lines, provider.name)
        db.add(order)
        db.flush()
        reserve_stock(db, [line.stock_line() for line in lines])

        metadata = {"order_id": str(order.id), "idempotency_key": uuid4().hex}
        try:
            if request.payment_token:
                result = provider.charge(
                    order.total_amount,
                    request.payment_token,
                    customer,
                    idempotency_key=metadata["idempotency_key"],
                    metadata={"order_id": str(order.id)},
                )
                if not result.success:
                    logger.info("[CHECKOUT] Payment declined for pending order %s: %s", order.id, result.failure_reason)
                    raise PaymentFailed(result.failure_reason or "Payment declined")
                _mark_paid(order, result.payment_reference, now)
                db.flush()
                record_merchant_fee(db, order)
            else:
                urls = {
                    "success_url": request.success_url or f"{settings.site_url}/checkout/success?order_id={order.id}",
                    "cancel_url": request.cancel_url or f"{settings.site_url}/checkout/cancel?order_id={order.id}",
                }
                session = provider.create_checkout(_provider_line_items(order), customer, urls, metadata)
                order.checkout_session_id = session.session_id
                session_url = session.url
        except PaymentProviderError as exc:
            raise PaymentFailed(str(exc)) from exc

    db.refresh(order)
    logger.info(
        "[CHECKOUT] Order %s created (%s, %s) total=%s status=%s",
        order.id,
        order.fulfillment_method,
        order.fulfillment_date.isoformat(),
        order.total_amount,
        order.status,
    )
    if order.payment_status == "paid":
        send_order_notifications(order)
    return CheckoutResult(order=order, checkout_url=session_url, checkout_session_id=order.checkout_session_id)


def create_manual_order(
    db: Session,
    request: ManualOrderRequest,
    admin: User | None,
    now: datetime | None = None,
) -> Order:
    """Create a confirmed back-office order paid outside the merchant providers."""
    now = now or business_now()
    choice = resolve_fulfillment(db, request, now, manual=True)
    lines = price_cart(db, request.items)

    with transaction_scope(db):
        order = _build_order(request, choice, lines, "manual")
        order.payment_method = request.payment_method
        order.admin_notes = request.admin_notes
        order.created_by_admin_id = admin.id if admin is not None else None
        db.add(order)
        db.flush()
        reserve_stock(db, [line.stock_line() for line in lines])
        set_status(order, "confirmed", now)
        if request.mark_paid:
            order.payment_status = "paid"
        log_action(db, actor=admin, action_type="order_created_manual", order_id=order.id, after_snapshot=order_snapshot(order))

    db.refresh(order)
    logger.info("[CHECKOUT] Manual order %s created by admin_id=%s", order.id, order.created_by_admin_id)
    send_order_notifications(order)
    return order


def _get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


def confirm_payment(db: Session, order_id: int, payment_reference: str, now: datetime | None = None) -> Order:
    """Settle a hosted-checkout order once the provider reports success."""
    order = _get_order(db, order_id)
    if order.payment_status == "paid":
        if order.payment_reference == payment_reference:
            return order
        raise ValidationError("Order is already paid")
    if order.status != "pending":
        raise ValidationError(f"Cannot confirm payment for a {order.status} order")

    with transaction_scope(db):
        _mark_paid(order, payment_reference, now or business_now())
        db.flush()
        record_merchant_fee(db, order)

    db.refresh(order)
    logger.info("[CHECKOUT] Payment confirmed for order %s", order.id)
    send_order_notifications(order)
    return order


def fail_payment(db: Session, order_id: int, now: datetime | None = None) -> Order:
    """Mark a hosted-checkout order as failed and release its stock."""
    order = _get_order(db, order_id)
    if order.status != "pending" or order.payment_status != "pending":
        raise ValidationError(f"Cannot fail payment for a {order.status} order")

    with transaction_scope(db):
        order.payment_status = "failed"
        set_status(order, "payment_failed", now or business_now())
        restore_stock(db, order)

    db.refresh(order)
    logger.info("[CHECKOUT] Payment failed for order %s; stock restored", order.id)
    return order
