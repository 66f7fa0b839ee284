"""Storefront checkout endpoint."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery.db.session import get_db
from bakery.payments import get_provider
from bakery.schemas.order import CheckoutRequest, CheckoutResponse
from bakery.services.checkout_service import checkout

router: APIRouter = APIRouter()


@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def create_checkout(payload: CheckoutRequest, db: Session = Depends(get_db)) -> CheckoutResponse:
    result = checkout(db, payload, provider=get_provider())
    order = result.order
    return CheckoutResponse(
        order_id=order.id,
        status=order.status,
        payment_status=order.payment_status,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        tax=order.tax,
        total_amount=order.total_amount,
        checkout_url=result.checkout_url,
        checkout_session_id=result.checkout_session_id,
    )
