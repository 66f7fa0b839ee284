"""Order email notifications.

Sends real emails via SMTP when configured, falls back to logging in mock mode.
Callers treat every send as best effort; a failure here never undoes an order.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from bakery.core.config import settings
from bakery.models import Order

logger = logging.getLogger(__name__)


def is_email_configured() -> bool:
    """Check if SMTP is properly configured."""
    return all([settings.smtp_host, settings.smtp_username, settings.smtp_password, settings.smtp_from_email])


def format_cents(amount: int) -> str:
    return f"${amount / 100:.2f}"


def send_email(to_email: str, subject: str, body: str) -> dict:
    """Send a plain-text email, or log it when SMTP is not configured.

    SMTP errors propagate to the caller.
    """
    if not is_email_configured():
        logger.info("[EMAIL] (mock) to=%s subject=%s", to_email, subject)
        return {"status": "mock", "to_email": to_email, "subject": subject, "mock": True}

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from_email
    msg["To"] = to_email
    msg.attach(MIMEText(body, "plain"))

    context = ssl.create_default_context()
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
        server.starttls(context=context)
        server.login(settings.smtp_username, settings.smtp_password)
        server.sendmail(settings.smtp_from_email, to_email, msg.as_string())

    logger.info("[EMAIL] Sent %r to %s", subject, to_email)
    return {"status": "sent", "to_email": to_email, "subject": subject, "mock": False}


def _order_lines(order: Order) -> list[str]:
    lines = [f"  {item.name} x{item.quantity}  {format_cents(item.price_at_purchase * item.quantity)}" for item in order.items]
    lines.append(f"  Subtotal: {format_cents(order.subtotal)}")
    if order.delivery_fee:
        lines.append(f"  Delivery fee: {format_cents(order.delivery_fee)}")
    lines.append(f"  Tax: {format_cents(order.tax)}")
    lines.append(f"  Total: {format_cents(order.total_amount)}")
    return lines


def _fulfillment_line(order: Order) -> str:
    when = order.fulfillment_date.strftime("%A, %B %d, %Y")
    window = f" ({order.time_window})" if order.time_window else ""
    if order.fulfillment_method == "pickup":
        place = order.pickup_location.name if order.pickup_location is not None else "the bakery"
        return f"Pickup at {place} on {when}{window}"
    return f"Delivery on {when}{window}"


def send_order_confirmation(order: Order) -> dict:
    greeting = f"Hi {order.customer_name}," if order.customer_name else "Hi,"
    body = "\n".join(
        [
            greeting,
            "",
            f"Thank you for your order #{order.id}.",
            _fulfillment_line(order),
            "",
            *_order_lines(order),
        ]
    )
    return send_email(order.customer_email, f"Order #{order.id} received", body)


def send_admin_new_order(order: Order) -> dict | None:
    if not settings.admin_notification_email:
        return None
    body = "\n".join(
        [
            f"New {order.fulfillment_method} order #{order.id} from {order.customer_name} <{order.customer_email}>.",
            _fulfillment_line(order),
            f"Payment: {order.merchant_provider} / {order.payment_status}",
            "",
            *_order_lines(order),
        ]
    )
    return send_email(settings.admin_notification_email, f"New order #{order.id}", body)


STATUS_MESSAGES: dict[str, str] = {
    "confirmed": "Your order is confirmed.",
    "preparing": "We are preparing your order.",
    "out_for_delivery": "Your order is out for delivery.",
    "delivered": "Your order has been delivered. Enjoy!",
    "ready_for_pickup": "Your order is ready for pickup.",
    "picked_up": "Your order has been picked up. Enjoy!",
}


def send_fulfillment_update(order: Order, new_status: str) -> dict:
    message = STATUS_MESSAGES.get(new_status, f"Your order status is now {new_status.replace('_', ' ')}.")
    body = "\n".join([f"Hi {order.customer_name},", "", message, _fulfillment_line(order)])
    return send_email(order.customer_email, f"Order #{order.id} update", body)
