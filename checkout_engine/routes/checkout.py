"""Checkout, payment and order status routes"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..database.orders import order_db
from ..errors import CheckoutValidationError, OrderNotFoundError, OrderStateError, PaymentError
from ..models.order import (
    CheckoutFormData,
    OrderStatus,
    PaymentStatus,
    get_display_status,
    is_confirmed,
    is_final_state,
)
from ..services.cart_service import cart_service
from ..services.order_payment import OrderPaymentStateMachine, payment_flows
from .cart import load_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


class StartCheckoutRequest(BaseModel):
    form: CheckoutFormData
    user_id: str = ""
    language: str = "en"


class StartCheckoutResponse(BaseModel):
    order_id: str
    client_secret: str
    intent_id: str
    amount: float


class PaymentStateResponse(BaseModel):
    order_id: Optional[str]
    state: str
    completed: bool
    completed_by: Optional[str] = None
    error: Optional[str] = None
    client_secret: Optional[str] = None
    intent_id: Optional[str] = None


class OrderStatusResponse(BaseModel):
    order_id: str
    status: OrderStatus
    payment_status: PaymentStatus
    display_status: str
    is_final: bool
    is_confirmed: bool
    receipt_number: str


class WebhookEvent(BaseModel):
    """Status change reported by the payment processor"""
    order_id: str
    payment_status: PaymentStatus
    status: Optional[OrderStatus] = None


def get_flow(order_id: str) -> OrderPaymentStateMachine:
    flow = payment_flows.get(order_id)
    if flow is None:
        raise HTTPException(status_code=404, detail="No checkout in progress for this order")
    return flow


@router.post("/{cart_id}/start", response_model=StartCheckoutResponse)
async def start_checkout(cart_id: str, request: StartCheckoutRequest):
    """Create the order and its payment intent"""
    session = await load_session(cart_id)

    async def clear_cart():
        await cart_service.clear(session)

    flow = OrderPaymentStateMachine(clear_cart=clear_cart)
    try:
        intent = await flow.start_checkout(
            session.state,
            request.form,
            user_id=request.user_id,
            estimated_distance=session.estimated_distance,
            language=request.language,
        )
    except CheckoutValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)
    except PaymentError as e:
        raise HTTPException(status_code=502, detail=str(e))

    payment_flows.put(flow)
    return StartCheckoutResponse(
        order_id=flow.order_id,
        client_secret=intent.client_secret,
        intent_id=intent.intent_id,
        amount=session.state.summary.final_total,
    )


@router.post("/orders/{order_id}/pay", response_model=PaymentStateResponse)
async def submit_payment(order_id: str):
    """Mark the payment as submitted and start waiting for confirmation"""
    flow = get_flow(order_id)
    try:
        flow.submit_payment()
    except OrderStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return PaymentStateResponse(**flow.snapshot())


@router.get("/orders/{order_id}/payment", response_model=PaymentStateResponse)
async def payment_result(order_id: str):
    """Current state of the payment attempt"""
    return PaymentStateResponse(**get_flow(order_id).snapshot())


@router.get("/orders/{order_id}", response_model=OrderStatusResponse)
async def order_status(order_id: str):
    """Order status with display helpers"""
    order = await order_db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderStatusResponse(
        order_id=order.id,
        status=order.status,
        payment_status=order.payment_status,
        display_status=get_display_status(order.status),
        is_final=is_final_state(order.status),
        is_confirmed=is_confirmed(order.status),
        receipt_number=order.receipt_number,
    )


@router.post("/webhook")
async def payment_webhook(event: WebhookEvent):
    """Apply a processor status change to the order document"""
    status = event.status
    if status is None and event.payment_status == PaymentStatus.PAID:
        status = OrderStatus.CONFIRMED

    try:
        order = await order_db.update_status(event.order_id, status=status, payment_status=event.payment_status)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except OrderStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(f"Webhook applied to order {order.id}: {order.status.value}/{order.payment_status.value}")
    return {"received": True, "status": order.status, "payment_status": order.payment_status}
